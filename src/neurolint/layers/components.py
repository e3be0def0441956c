"""Layer 3: structural repair of component code.

Mechanical, pattern-based fixes applied in a fixed order: missing hook
imports, missing iteration keys in list rendering, and missing ``alt``
attributes on images.  Every sub-pass skips code it already fixed.
"""

from __future__ import annotations

import re

INTERACTIVE_TAGS = frozenset({"button", "input", "a", "textarea", "form", "select"})

KNOWN_HOOKS = ("useState", "useEffect", "useCallback", "useMemo", "useRef")

_HOOK_CALL = re.compile(
    r"\buse(State|Effect|Callback|Memo|Ref|Context|Reducer"
    r"|ImperativeHandle|LayoutEffect|DebugValue)\("
)
_IMPORT_STATEMENT = re.compile(r"import.*from.*['\"][^'\"]+['\"]")

_MAP_WITH_CHILDREN = re.compile(
    r"\.map\(\s*([A-Za-z0-9_]+)\s*=>\s*<(\w+)([^>]*?)>(.*?)</\2>\s*\)"
)
_MAP_SELF_CLOSING = re.compile(r"\.map\(\s*([A-Za-z0-9_]+)\s*=>\s*<(\w+)([^>]*?)/>")
_MAP_WITH_INDEX = re.compile(
    r"\.map\(\s*\(([^,)]+),\s*([^)]+)\)\s*=>\s*<(\w+)([^>]*?)>(.*?)</\3>\s*\)"
)
_IMG_TAG = re.compile(r"<img\b([^>]*?)(?:\s*/?>)")


def transform(code: str) -> str:
    code = add_missing_imports(code)
    code = add_missing_keys(code)
    code = add_missing_alt(code)
    return code


def add_missing_imports(code: str) -> str:
    """Prepend a react hook import when hooks are used without one."""
    if not _HOOK_CALL.search(code):
        return code
    existing = " ".join(m.group(0) for m in _IMPORT_STATEMENT.finditer(code))
    if "react" in existing:
        return code
    hooks = [hook for hook in KNOWN_HOOKS if f"{hook}(" in code]
    if not hooks:
        return code
    return f"import {{ {', '.join(hooks)} }} from 'react';\n\n{code}"


def _skip_key(tag: str, props: str, match: str) -> bool:
    return "key=" in props or "onClick=" in match or tag in INTERACTIVE_TAGS


def add_missing_keys(code: str) -> str:
    """Insert a ``key`` prop on elements rendered inside ``.map`` callbacks."""

    def with_children(m: re.Match[str]) -> str:
        item, tag, props, children = m.groups()
        if _skip_key(tag, props, m.group(0)):
            return m.group(0)
        key = f"key={{{item}.id ?? index}}"
        return f".map(({item}, index) => <{tag} {key}{props}>{children}</{tag}>)"

    def self_closing(m: re.Match[str]) -> str:
        item, tag, props = m.groups()
        if _skip_key(tag, props, m.group(0)):
            return m.group(0)
        return f".map(({item}, index) => <{tag} key={{{item}.id ?? index}}{props}/>"

    def indexed(m: re.Match[str]) -> str:
        item, index, tag, props, children = m.groups()
        if _skip_key(tag, props, m.group(0)):
            return m.group(0)
        index = index.strip()
        return f".map(({item}, {index}) => <{tag} key={{{index}}}{props}>{children}</{tag}>)"

    code = _MAP_WITH_CHILDREN.sub(with_children, code)
    code = _MAP_SELF_CLOSING.sub(self_closing, code)
    code = _MAP_WITH_INDEX.sub(indexed, code)
    return code


def add_missing_alt(code: str) -> str:
    """Give every ``<img>`` without an ``alt`` attribute an empty one."""

    def fix(m: re.Match[str]) -> str:
        attributes = m.group(1)
        if "alt=" in attributes:
            return m.group(0)
        return f'<img{attributes} alt="" />'

    return _IMG_TAG.sub(fix, code)
