"""Layer 4: environment-guard insertion.

Makes component code safe to evaluate where host globals do not exist
(server rendering):

1. References to ``localStorage``/``sessionStorage`` calls and to
   ``window``, ``document``, ``navigator``, ``location`` and ``history``
   members get a ``typeof X !== "undefined" &&`` existence check.
2. When stateful hooks co-occur with host-global access, a ``mounted``
   flag is introduced and rendering is deferred until it is set.
3. A client-only directive is prepended when interactivity signals are
   present and no directive exists yet.

References that are already guarded, or are member accesses on another
object (``window.location``), are left alone so the layer is a fixed point.
"""

from __future__ import annotations

import re
from typing import NamedTuple

CLIENT_DIRECTIVE = "'use client';"
DIRECTIVE_SPELLINGS = ("'use client'", '"use client"')


class GuardRule(NamedTuple):
    pattern: re.Pattern[str]
    replacement: str


def _guard(host: str, reference: str, replacement: str) -> GuardRule:
    prefix = f'typeof {host} !== "undefined" && '
    # Fixed-width lookbehinds: not already guarded, not a member access.
    pattern = re.compile(rf"(?<!{re.escape(prefix)})(?<![\w.$]){reference}")
    return GuardRule(pattern, prefix + replacement)


_STORAGE_METHODS = r"\.(?=(?:getItem|setItem|removeItem|clear|key)\()"

GUARD_RULES: tuple[GuardRule, ...] = (
    _guard("window", r"localStorage" + _STORAGE_METHODS, "localStorage."),
    _guard("window", r"sessionStorage" + _STORAGE_METHODS, "sessionStorage."),
    _guard("window", r"window\.(?=[A-Za-z_$])", "window."),
    _guard("document", r"document\.(?=[A-Za-z_$])", "document."),
    _guard("navigator", r"navigator\.(?=[A-Za-z_$])", "navigator."),
    _guard("window", r"location\.(?=[A-Za-z_$])", "window.location."),
    _guard("window", r"history\.(?=[A-Za-z_$])", "window.history."),
)

HOST_GLOBAL_MARKERS = ("localStorage", "sessionStorage", "window.", "document.", "navigator.")
INTERACTIVITY_SIGNALS = ("useState", "useEffect", "onClick", "onChange", "onSubmit")

_STATE_DECLARATION = re.compile(r"const \[([^,\]]+),\s*set[^\]]+\] = useState")
_RENDER_RETURN = re.compile(r"return\s*\(")

MOUNTED_STATE = (
    "const [mounted, setMounted] = useState(false);\n"
    "  useEffect(() => {\n"
    "    setMounted(true);\n"
    "  }, []);\n"
    "  "
)
MOUNTED_RENDER_GUARD = "if (!mounted) {\n    return null;\n  }\n\n  return ("


def transform(code: str) -> str:
    code = add_environment_guards(code)
    code = add_mounted_state(code)
    code = add_client_directive(code)
    return code


def add_environment_guards(code: str) -> str:
    for rule in GUARD_RULES:
        code = rule.pattern.sub(rule.replacement, code)
    return code


def add_mounted_state(code: str) -> str:
    """Introduce the mounted flag and deferred-render guard."""
    uses_host = any(marker in code for marker in HOST_GLOBAL_MARKERS)
    if not uses_host or "useState" not in code or "mounted" in code:
        return code
    match = _STATE_DECLARATION.search(code)
    if match is None:
        return code
    start = match.start()
    code = code[:start] + MOUNTED_STATE + code[start:]
    return _RENDER_RETURN.sub(MOUNTED_RENDER_GUARD, code, count=1)


def has_client_directive(code: str) -> bool:
    return any(spelling in code for spelling in DIRECTIVE_SPELLINGS)


def add_client_directive(code: str) -> str:
    if has_client_directive(code):
        return code
    if not any(signal in code for signal in INTERACTIVITY_SIGNALS):
        return code
    return f"{CLIENT_DIRECTIVE}\n\n{code}"
