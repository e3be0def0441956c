"""Tests for CodeValidator: single-text reports and before/after decisions."""

from __future__ import annotations

import pytest

from neurolint.domain.models import ValidationReport
from neurolint.domain.types import CorruptionTag, RiskLevel, SecurityTag
from neurolint.services import validation
from neurolint.services.validation import CodeValidator, count_decision_points

VALID = """\
import React from 'react';

export default function List() {
  const items = [1, 2, 3];
  return <ul>{items.map((i) => <li key={i}>{i}</li>)}</ul>;
}
"""

NESTED_IMPORT = "import {\nimport { useState } from 'react';\n" + VALID


class TestValidate:
    def test_deterministic(self) -> None:
        validator = CodeValidator()
        assert validator.validate(NESTED_IMPORT) == validator.validate(NESTED_IMPORT)

    def test_valid_code(self) -> None:
        report = CodeValidator().validate(VALID)
        assert report.is_valid
        assert report.errors == []
        assert report.corruption_detected is False

    @pytest.mark.parametrize("bad", ["", None, 42])
    def test_bad_input_never_raises(self, bad: object) -> None:
        report = CodeValidator().validate(bad)
        assert report.is_valid is False
        assert report.corruption_detected is True
        assert report.errors == ["Invalid code input: must be a non-empty string"]

    def test_too_many_lines(self) -> None:
        report = CodeValidator(max_lines=3).validate("a\nb\nc\nd")
        assert report.is_valid is False
        assert report.corruption_detected is False
        assert report.errors == ["Code too large: 4 lines exceeds maximum of 3"]

    def test_nested_import_block(self) -> None:
        report = CodeValidator().validate(NESTED_IMPORT)
        assert report.corruption_detected
        assert f"Code corruption detected: {CorruptionTag.NESTED_IMPORT_BLOCK}" in report.errors

    def test_multiple_default_exports(self) -> None:
        report = CodeValidator().validate("export default A;\nexport default B;")
        assert f"Code corruption detected: {CorruptionTag.MULTIPLE_DEFAULT_EXPORTS}" in (
            report.errors
        )

    def test_mismatched_tag_closure(self) -> None:
        report = CodeValidator().validate("const a = <div></span>;")
        assert f"Code corruption detected: {CorruptionTag.MALFORMED_TAG_CLOSURE}" in report.errors

    @pytest.mark.parametrize(
        "code",
        ["const a = <div></div>;", "const a = <br/>;", "const a = <Foo.Bar ></Foo.Bar>;"],
    )
    def test_well_formed_tags(self, code: str) -> None:
        assert CodeValidator().validate(code).corruption_detected is False

    def test_skip_corruption(self) -> None:
        report = CodeValidator().validate(NESTED_IMPORT, skip_corruption=True)
        assert report.is_valid

    def test_security_issues_do_not_invalidate(self) -> None:
        report = CodeValidator().validate("eval('1 + 1');\nsetTimeout('go()', 10);")
        assert report.is_valid
        assert report.security_issues == [
            f"Potentially dangerous pattern: {SecurityTag.DYNAMIC_EVAL}",
            f"Potentially dangerous pattern: {SecurityTag.STRING_TIMER}",
        ]

    def test_function_keyword_is_not_dynamic_function(self) -> None:
        report = CodeValidator().validate("const f = function () { return 1; };")
        assert report.security_issues == []

    def test_unsafe_url(self) -> None:
        report = CodeValidator().validate('<a href="javascript:void(0)">x</a>')
        assert f"Potentially dangerous pattern: {SecurityTag.UNSAFE_URL}" in report.security_issues

    def test_warnings(self) -> None:
        code = "console.log(1);\n" * 10 + "// TODO: remove"
        report = CodeValidator().validate(code)
        assert len(report.warnings) == 2


class TestDecisionPoints:
    def test_keywords(self) -> None:
        assert count_decision_points("if (a) {} else { for (;;) {} }") == 3

    def test_ternary(self) -> None:
        assert count_decision_points("const x = a ? b : c;") == 1

    def test_optional_chaining_and_nullish(self) -> None:
        assert count_decision_points("const x = a?.b ?? c;") == 0


class TestCompareBeforeAfter:
    def test_identical_is_low(self) -> None:
        decision = CodeValidator().compare_before_after(VALID, VALID)
        assert decision.should_revert is False
        assert decision.risk_level == RiskLevel.LOW

    def test_introduced_corruption_is_critical(self) -> None:
        decision = CodeValidator().compare_before_after(VALID, NESTED_IMPORT)
        assert decision.should_revert
        assert decision.risk_level == RiskLevel.CRITICAL
        assert decision.reason == "Transformation introduced code corruption"

    def test_existing_corruption_not_blamed(self) -> None:
        decision = CodeValidator().compare_before_after(NESTED_IMPORT, NESTED_IMPORT + "\n")
        assert decision.risk_level != RiskLevel.CRITICAL

    def test_broke_valid_code_is_high(self) -> None:
        validator = CodeValidator(max_lines=5)
        decision = validator.compare_before_after("a\nb", "\n".join("x" * 10))
        assert decision.should_revert
        assert decision.risk_level == RiskLevel.HIGH
        assert decision.reason is not None
        assert decision.reason.startswith("Transformation broke valid code: Code too large")

    def test_complexity_increase_is_medium_revert(self) -> None:
        validator = CodeValidator(max_complexity_increase=2)
        decision = validator.compare_before_after("x", "if (a) {}\nif (b) {}\nif (c) {}")
        assert decision.should_revert
        assert decision.risk_level == RiskLevel.MEDIUM
        assert decision.metrics.complexity_delta == 3

    def test_many_changed_lines_is_medium_without_revert(self) -> None:
        decision = CodeValidator().compare_before_after("a", "\n".join(["a"] * 150))
        assert decision.should_revert is False
        assert decision.risk_level == RiskLevel.MEDIUM
        assert decision.metrics.lines_changed == 149

    def test_small_change_is_low(self) -> None:
        decision = CodeValidator().compare_before_after("const a = 1;", "const a = 2;")
        assert decision.should_revert is False
        assert decision.risk_level == RiskLevel.LOW


class TestLenientValidation:
    def test_never_reverts_corruption(self) -> None:
        decision = CodeValidator().lenient_validation(VALID, NESTED_IMPORT)
        assert decision.should_revert is False
        assert decision.risk_level == RiskLevel.LOW

    @pytest.mark.parametrize(
        ("added", "risk"),
        [(10, RiskLevel.LOW), (1_500, RiskLevel.MEDIUM), (6_000, RiskLevel.HIGH)],
    )
    def test_risk_by_line_delta(self, added: int, risk: RiskLevel) -> None:
        decision = CodeValidator().lenient_validation("a", "a" + "\n" * added)
        assert decision.should_revert is False
        assert decision.risk_level == risk


class TestAdvancedTransform:
    def test_base_revert_passes_through(self) -> None:
        decision = CodeValidator().validate_advanced_transform(VALID, NESTED_IMPORT)
        assert decision.risk_level == RiskLevel.CRITICAL

    def test_duplicate_directives(self) -> None:
        decision = CodeValidator().validate_advanced_transform(
            "const a = 1;", "'use client';\n'use client';\nconst a = 1;"
        )
        assert decision.should_revert
        assert decision.risk_level == RiskLevel.HIGH
        assert decision.reason == "Multiple 'use client' directives detected"

    def test_duplicated_keywords(self) -> None:
        decision = CodeValidator().validate_advanced_transform("x", "import import x from 'x';")
        assert decision.reason == "Duplicated import/export statements detected"

    def test_clean_change_accepted(self) -> None:
        decision = CodeValidator().validate_advanced_transform("const a = 1;", "const a = 2;")
        assert decision.should_revert is False


class TestModuleFunctions:
    def test_delegate_to_default_validator(self) -> None:
        assert validation.validate("").is_valid is False
        assert validation.compare_before_after(VALID, NESTED_IMPORT).should_revert
        assert validation.lenient_validation(VALID, NESTED_IMPORT).should_revert is False
        assert validation.validate_advanced_transform("a", "a").risk_level == RiskLevel.LOW


class _LintingValidator(CodeValidator):
    """Reports twelve extra errors per ``lint-me`` marker."""

    def validate(self, code: object, *, skip_corruption: bool = False) -> ValidationReport:
        report = super().validate(code, skip_corruption=skip_corruption)
        if not isinstance(code, str) or "lint-me" not in code:
            return report
        extra = [f"lint error {i}" for i in range(12 * code.count("lint-me"))]
        return report.model_copy(update={"is_valid": False, "errors": [*report.errors, *extra]})


class TestNewErrorCeiling:
    def test_many_new_errors_is_high_revert(self) -> None:
        decision = _LintingValidator().compare_before_after("lint-me", "lint-me lint-me")
        assert decision.should_revert
        assert decision.risk_level == RiskLevel.HIGH
        assert decision.reason == "Transformation added 12 new errors"
        assert decision.metrics.error_count == 12

    def test_same_error_count_not_reverted(self) -> None:
        validator = _LintingValidator()
        decision = validator.compare_before_after("lint-me", "lint-me\n// TODO")
        assert decision.should_revert is False
