"""Layer 6: quality hardening.

Conservative, narrowly gated edits only:

- wrap clearly high-risk components (network, upload, streaming) in a
  fallback render;
- add a loading-state variable to small async components;
- wrap the body of the first async arrow function in try/catch;
- terminate interface members with semicolons;
- make sure the module has exactly one default export.
"""

from __future__ import annotations

import re

HIGH_RISK_MARKERS = ("fetch(", "axios.", "upload", "PDF", "WebSocket", "EventSource")
ASYNC_MARKERS = ("fetch(", "axios.", "api.")
SMALL_COMPONENT_CHARS = 300

_DEFAULT_FUNCTION_EXPORT = re.compile(r"export default function (\w+)")
_DEFAULT_DECLARATION = re.compile(
    r"^\s*export default (?:async\s+)?(?:function|class)\b", re.MULTILINE
)
_DEFAULT_STATEMENT = re.compile(r"^\s*export default \w+;\s*$")
_FIRST_FUNCTION = re.compile(r"function (\w+)\s*\(")
_STATE_DECLARATION = re.compile(r"const \[([^,\]]+),\s*set[^\]]+\] = useState")
_TRY_BLOCK = re.compile(r"\btry\s*\{")
_CATCH = re.compile(r"\bcatch\b")
_ASYNC_ARROW = re.compile(r"^([ \t]*)const \w+ = async \([^)]*\) => \{[ \t]*$", re.MULTILINE)
_INTERFACE_BODY = re.compile(r"(\binterface\s+\w+\s*\{)([^{}]*)(\})")
# A "name: type" member line with no terminator and no trailing comment.
_UNTERMINATED_MEMBER = re.compile(
    r"^(?!.*//)([ \t]*[\w$]+\??[ \t]*:[^;,{}\n]*[^;,{}\s])[ \t]*$", re.MULTILINE
)

FALLBACK_WRAPPER = """\
// Fallback render for {name}
function {name}WithErrorBoundary(props: any) {{
  try {{
    return <{name} {{...props}} />;
  }} catch (error) {{
    console.error('{name} error:', error);
    return (
      <div className="p-4 text-red-600 bg-red-50 rounded-lg border border-red-200">
        <h3 className="font-semibold">Something went wrong</h3>
        <p className="text-sm mt-1">Please try refreshing the page.</p>
      </div>
    );
  }}
}}

"""


def transform(code: str) -> str:
    code = add_fallback_render(code)
    code = add_loading_state(code)
    code = add_error_handling(code)
    code = fix_interface_semicolons(code)
    code = ensure_single_default_export(code)
    return code


def add_fallback_render(code: str) -> str:
    if not any(marker in code for marker in HIGH_RISK_MARKERS):
        return code
    if "ErrorBoundary" in code or _TRY_BLOCK.search(code):
        return code
    match = _DEFAULT_FUNCTION_EXPORT.search(code)
    if match is None:
        return code
    name = match.group(1)
    wrapped = code.replace(
        f"export default function {name}",
        FALLBACK_WRAPPER.format(name=name) + f"function {name}",
        1,
    )
    return f"{wrapped}\n\nexport default {name}WithErrorBoundary;"


def add_loading_state(code: str) -> str:
    if len(code) >= SMALL_COMPONENT_CHARS or "useState" not in code:
        return code
    if not any(marker in code for marker in ASYNC_MARKERS):
        return code
    if "loading" in code or "isLoading" in code:
        return code
    match = _STATE_DECLARATION.search(code)
    if match is None:
        return code
    start = match.start()
    return code[:start] + "const [isLoading, setIsLoading] = useState(false);\n  " + code[start:]


def _closing_brace(code: str, open_index: int) -> int | None:
    depth = 0
    for index in range(open_index, len(code)):
        if code[index] == "{":
            depth += 1
        elif code[index] == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def add_error_handling(code: str) -> str:
    """Wrap the first multi-line async arrow function body in try/catch.

    Skipped when the module already handles errors anywhere.
    """
    if "async" not in code or "await" not in code:
        return code
    if _TRY_BLOCK.search(code) or _CATCH.search(code):
        return code
    match = _ASYNC_ARROW.search(code)
    if match is None:
        return code
    open_index = code.rindex("{", match.start(), match.end())
    close_index = _closing_brace(code, open_index)
    if close_index is None:
        return code
    body = code[open_index + 1 : close_index].rstrip().lstrip("\n")
    if "await" not in body:
        return code

    indent = match.group(1)
    inner = "\n".join(f"  {line}" if line.strip() else line for line in body.split("\n"))
    wrapped = (
        f"{{\n{indent}  try {{\n{inner}\n"
        f"{indent}  }} catch (error) {{\n"
        f'{indent}    console.error("Error:", error);\n'
        f"{indent}  }}\n{indent}}}"
    )
    return code[:open_index] + wrapped + code[close_index + 1 :]


def fix_interface_semicolons(code: str) -> str:
    """Terminate ``name: type`` members of flat interfaces with ``;``."""

    def fix(m: re.Match[str]) -> str:
        head, body, tail = m.groups()
        return head + _UNTERMINATED_MEMBER.sub(r"\1;", body) + tail

    return _INTERFACE_BODY.sub(fix, code)


def ensure_single_default_export(code: str) -> str:
    """Add a missing default export, or drop duplicated ones.

    A default declaration (``export default function X``) wins over
    ``export default X;`` statements; among statements the last one wins.
    """
    lines = code.split("\n")
    statements = [i for i, line in enumerate(lines) if _DEFAULT_STATEMENT.match(line)]
    has_declaration = bool(_DEFAULT_DECLARATION.search(code))

    if not statements and not has_declaration:
        match = _FIRST_FUNCTION.search(code)
        if match is None:
            return code
        return f"{code}\n\nexport default {match.group(1)};"

    drop = set(statements) if has_declaration else set(statements[:-1])
    if not drop:
        return code
    return "\n".join(line for i, line in enumerate(lines) if i not in drop)
