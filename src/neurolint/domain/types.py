"""Classification enums shared by the validator and the pipeline."""

from __future__ import annotations

from enum import StrEnum


class RiskLevel(StrEnum):
    """Risk attached to a before/after transformation pair."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CorruptionTag(StrEnum):
    """Heuristic structural defects the validator can recognise."""

    NESTED_IMPORT_BLOCK = "nested_import_block"
    MULTIPLE_DEFAULT_EXPORTS = "multiple_default_exports"
    NESTED_FUNCTION_DECLARATION = "nested_function_declaration"
    MALFORMED_TAG_CLOSURE = "malformed_tag_closure"


class SecurityTag(StrEnum):
    """Dangerous-call families reported as security issues."""

    DYNAMIC_EVAL = "dynamic_eval"
    DYNAMIC_FUNCTION = "dynamic_function"
    STRING_TIMER = "string_timer"
    PROTOTYPE_ACCESS = "prototype_access"
    SCRIPT_TAG = "script_tag"
    UNSAFE_URL = "unsafe_url"
