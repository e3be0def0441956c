"""Shared service-layer helper functions."""

from __future__ import annotations


def calculate_changes(before: str, after: str) -> int:
    """Count changed lines: index-aligned comparison plus the length delta.

    Not a diff.  An inserted line near the top shifts every following
    line and counts each of them as changed.

    Examples:
        >>> calculate_changes("a\\nb", "a\\nb")
        0
        >>> calculate_changes("a\\nb", "a\\nc\\nd")
        2
    """
    before_lines = before.split("\n")
    after_lines = after.split("\n")
    changes = abs(len(before_lines) - len(after_lines))
    changes += sum(1 for b, a in zip(before_lines, after_lines, strict=False) if b != a)
    return changes


def detect_improvements(before: str, after: str) -> list[str]:
    """Describe what a transformation added, by marker sniffing."""
    if before == after:
        return []
    improvements = ["Code transformation applied"]
    markers = (
        ("key=", "Added missing key props"),
        ("alt=", "Improved accessibility"),
        ("typeof window", "Added SSR guards"),
        ("use client", "Added client directive"),
        ("isLoading", "Added loading state"),
        ("WithErrorBoundary", "Added fallback render"),
    )
    for marker, label in markers:
        if marker in after and marker not in before:
            improvements.append(label)
    return improvements
