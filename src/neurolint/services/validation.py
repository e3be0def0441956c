"""CodeValidator: heuristic structural risk classification.

Two entry points:

- :meth:`CodeValidator.validate` classifies one text.
- :meth:`CodeValidator.compare_before_after` (and its lenient and
  advanced variants) classify a before/after pair and recommend whether
  the transformation should be reverted.

Detection is signature based, not parsing: every check is a fixed
pattern over the raw text and is an approximation.  Callers only depend
on the report shapes, so a real parser can replace the signature tables
without changing them.

INVARIANT: ``validate`` never raises for any input.  Bad input becomes
an invalid report with ``corruption_detected=True``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from neurolint.domain.models import RevertDecision, RevertMetrics, ValidationReport
from neurolint.domain.types import CorruptionTag, RiskLevel, SecurityTag

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINES = 50_000
DEFAULT_MAX_COMPLEXITY_INCREASE = 50
MEMORY_WARNING_BYTES = 50 * 1024 * 1024

MAX_NEW_ERRORS = 10
MEDIUM_LINES_CHANGED = 100
LENIENT_MEDIUM_LINES = 1_000
LENIENT_HIGH_LINES = 5_000

CONSOLE_LOG_WARNING_COUNT = 10


class SecuritySignature(NamedTuple):
    tag: SecurityTag
    pattern: re.Pattern[str]


class CorruptionSignature(NamedTuple):
    tag: CorruptionTag
    pattern: re.Pattern[str]


SECURITY_SIGNATURES: tuple[SecuritySignature, ...] = (
    SecuritySignature(SecurityTag.DYNAMIC_EVAL, re.compile(r"\beval\s*\(")),
    SecuritySignature(SecurityTag.DYNAMIC_FUNCTION, re.compile(r"\bFunction\s*\(")),
    SecuritySignature(
        SecurityTag.STRING_TIMER, re.compile(r"\bset(?:Timeout|Interval)\s*\(\s*['\"`]")
    ),
    SecuritySignature(
        SecurityTag.PROTOTYPE_ACCESS,
        re.compile(r"__proto__|constructor\s*\.\s*constructor"),
    ),
    SecuritySignature(SecurityTag.SCRIPT_TAG, re.compile(r"<script\b", re.IGNORECASE)),
    SecuritySignature(
        SecurityTag.UNSAFE_URL,
        re.compile(r"\b(?:javascript|vbscript)\s*:|data\s*:\s*text/html", re.IGNORECASE),
    ),
)

CORRUPTION_SIGNATURES: tuple[CorruptionSignature, ...] = (
    CorruptionSignature(
        CorruptionTag.NESTED_IMPORT_BLOCK,
        re.compile(r"import\s*\{\s*\n\s*import\s*\{"),
    ),
    CorruptionSignature(
        CorruptionTag.MULTIPLE_DEFAULT_EXPORTS,
        re.compile(r"export\s+default\b[^\n]*\n[\s\S]*?\bexport\s+default\b"),
    ),
    CorruptionSignature(
        CorruptionTag.NESTED_FUNCTION_DECLARATION,
        re.compile(r"function\s+\w+\s*\(\s*function\s+\w+"),
    ),
    # An opening tag immediately closed by a tag of another name.
    CorruptionSignature(
        CorruptionTag.MALFORMED_TAG_CLOSURE,
        re.compile(r"<([A-Za-z][\w.]*)(?:\s[^<>]*)?(?<!/)>\s*</(?!\1\s*>)[^<>]*>"),
    ),
)

_DECISION_KEYWORDS = re.compile(r"\b(?:if|else|while|for|switch|case)\b")
_TERNARY = re.compile(r"(?<!\?)\?(?![.?])\s*[^:]+\s*:")

_CLIENT_DIRECTIVE = re.compile(r"""^\s*['"]use client['"];?\s*$""", re.MULTILINE)
_OPEN_TAG = re.compile(r"<[^/>][^>]*>")
_CLOSE_TAG = re.compile(r"</[^>]+>")


def count_decision_points(code: str) -> int:
    """Count conditionals, loops, switch/case and ternaries by keyword matching."""
    return len(_DECISION_KEYWORDS.findall(code)) + len(_TERNARY.findall(code))


def _line_count(code: str) -> int:
    return len(code.split("\n"))


class CodeValidator:
    """Signature-based validator with configurable ceilings."""

    def __init__(
        self,
        *,
        max_lines: int = DEFAULT_MAX_LINES,
        max_complexity_increase: int = DEFAULT_MAX_COMPLEXITY_INCREASE,
    ) -> None:
        self.max_lines = max_lines
        self.max_complexity_increase = max_complexity_increase

    # ------------------------------------------------------------------
    # Single text
    # ------------------------------------------------------------------

    def validate(self, code: object, *, skip_corruption: bool = False) -> ValidationReport:
        """Classify one text for size, security and corruption risk."""
        if not isinstance(code, str) or not code:
            return ValidationReport(
                is_valid=False,
                errors=["Invalid code input: must be a non-empty string"],
                corruption_detected=True,
            )

        errors: list[str] = []
        warnings: list[str] = []
        performance_issues: list[str] = []
        security_issues: list[str] = []
        corruption_detected = False

        lines = _line_count(code)
        if lines > self.max_lines:
            errors.append(f"Code too large: {lines} lines exceeds maximum of {self.max_lines}")

        if len(code) * 4 > MEMORY_WARNING_BYTES:
            performance_issues.append("Large file may cause memory issues during processing")

        for security in SECURITY_SIGNATURES:
            if security.pattern.search(code):
                security_issues.append(f"Potentially dangerous pattern: {security.tag}")

        if not skip_corruption:
            for corruption in CORRUPTION_SIGNATURES:
                if corruption.pattern.search(code):
                    corruption_detected = True
                    errors.append(f"Code corruption detected: {corruption.tag}")

        if code.count("console.log") >= CONSOLE_LOG_WARNING_COUNT:
            warnings.append(
                "Many console.log statements detected - consider removing in production"
            )
        if "// TODO" in code or "// FIXME" in code:
            warnings.append("TODO/FIXME comments detected")

        return ValidationReport(
            is_valid=not corruption_detected and not errors,
            errors=errors,
            warnings=warnings,
            corruption_detected=corruption_detected,
            performance_issues=performance_issues,
            security_issues=security_issues,
        )

    # ------------------------------------------------------------------
    # Before/after pairs
    # ------------------------------------------------------------------

    def compare_before_after(self, before: str, after: str) -> RevertDecision:
        """Recommend accept/revert for a transformation, strictest rule first."""
        if before == after:
            return RevertDecision(should_revert=False, risk_level=RiskLevel.LOW)

        before_report = self.validate(before)
        after_report = self.validate(after)
        metrics = RevertMetrics(
            lines_changed=abs(_line_count(after) - _line_count(before)),
            complexity_delta=count_decision_points(after) - count_decision_points(before),
            error_count=len(after_report.errors) - len(before_report.errors),
        )

        if after_report.corruption_detected and not before_report.corruption_detected:
            return RevertDecision(
                should_revert=True,
                reason="Transformation introduced code corruption",
                risk_level=RiskLevel.CRITICAL,
                metrics=metrics,
            )
        if before_report.is_valid and not after_report.is_valid:
            return RevertDecision(
                should_revert=True,
                reason=f"Transformation broke valid code: {', '.join(after_report.errors)}",
                risk_level=RiskLevel.HIGH,
                metrics=metrics,
            )
        # Built-in signatures yield at most five errors; subclasses may report more.
        if metrics.error_count > MAX_NEW_ERRORS:
            return RevertDecision(
                should_revert=True,
                reason=f"Transformation added {metrics.error_count} new errors",
                risk_level=RiskLevel.HIGH,
                metrics=metrics,
            )
        if metrics.complexity_delta > self.max_complexity_increase:
            return RevertDecision(
                should_revert=True,
                reason=f"Transformation increased complexity by {metrics.complexity_delta}",
                risk_level=RiskLevel.MEDIUM,
                metrics=metrics,
            )
        if metrics.error_count > 0 or metrics.lines_changed > MEDIUM_LINES_CHANGED:
            return RevertDecision(should_revert=False, risk_level=RiskLevel.MEDIUM, metrics=metrics)
        return RevertDecision(should_revert=False, risk_level=RiskLevel.LOW, metrics=metrics)

    def lenient_validation(self, before: str, after: str) -> RevertDecision:
        """Line-delta-only classification that never recommends a revert.

        Used for layers that legitimately make large structural edits
        (environment guards, framework conventions).  Corruption and
        error scanning are skipped entirely.
        """
        if before == after:
            return RevertDecision(should_revert=False, risk_level=RiskLevel.LOW)

        lines_changed = abs(_line_count(after) - _line_count(before))
        risk = RiskLevel.LOW
        if lines_changed > LENIENT_HIGH_LINES:
            risk = RiskLevel.HIGH
        elif lines_changed > LENIENT_MEDIUM_LINES:
            risk = RiskLevel.MEDIUM

        logger.debug(
            "Lenient validation: corruption scan skipped (%d lines changed)", lines_changed
        )
        return RevertDecision(
            should_revert=False,
            risk_level=risk,
            metrics=RevertMetrics(lines_changed=lines_changed),
        )

    def validate_advanced_transform(self, before: str, after: str) -> RevertDecision:
        """Standard comparison plus conflict checks for late, aggressive layers."""
        base = self.compare_before_after(before, after)
        if base.should_revert:
            return base

        issues: list[str] = []
        if after.count("export default") > before.count("export default") + 1:
            issues.append("Multiple export default statements detected")
        if "React.memo(React.memo(" in after:
            issues.append("Nested React.memo wrapping detected")
        if len(_CLIENT_DIRECTIVE.findall(after)) > 1:
            issues.append("Multiple 'use client' directives detected")
        if "import import" in after or "export export" in after:
            issues.append("Duplicated import/export statements detected")
        if "</" in after and len(_OPEN_TAG.findall(after)) < len(_CLOSE_TAG.findall(after)):
            issues.append("Malformed JSX structure detected")

        if issues:
            return RevertDecision(
                should_revert=True,
                reason=issues[0],
                risk_level=RiskLevel.HIGH,
                metrics=base.metrics,
            )
        return base


RevertCheck = Callable[[str, str], RevertDecision]

_default_validator = CodeValidator()


def get_default_validator() -> CodeValidator:
    return _default_validator


def validate(code: object) -> ValidationReport:
    return _default_validator.validate(code)


def compare_before_after(before: str, after: str) -> RevertDecision:
    return _default_validator.compare_before_after(before, after)


def lenient_validation(before: str, after: str) -> RevertDecision:
    return _default_validator.lenient_validation(before, after)


def validate_advanced_transform(before: str, after: str) -> RevertDecision:
    return _default_validator.validate_advanced_transform(before, after)
