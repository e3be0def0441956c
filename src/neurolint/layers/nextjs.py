"""Layer 5: framework-convention repair.

Sub-passes, in order:

- collapse every client-only directive into one occurrence at the first
  code line;
- flatten nested/unterminated import blocks into well-formed statements
  and drop exact duplicate import lines;
- add the directive to clear client components that lack it;
- normalise the blank line after the directive;
- App Router naming (``Page``/``Layout``) and a default ``metadata``
  export for small pages.
"""

from __future__ import annotations

import re

from neurolint.layers.hydration import CLIENT_DIRECTIVE, has_client_directive

_DIRECTIVE_LINES = frozenset({"'use client';", '"use client";', "'use client'", '"use client"'})

_NESTED_IMPORT_BLOCK = re.compile(
    r"import\s*\{\s*\n\s*import\s*\{([^}]+)\}\s*from\s*[\"']([^\"']+)[\"']", re.MULTILINE
)
# "import {" left open while the next statement starts another import.
_DANGLING_IMPORT_OPENER = re.compile(r"^import\s*\{\s*\n(?=\s*import\b)", re.MULTILINE)
_COMPLETE_IMPORT_LINE = re.compile(
    r"^import\s.+\bfrom\s+[\"'][^\"']+[\"'];?$|^import\s+[\"'][^\"']+[\"'];?$"
)

_CORE_HOOKS = re.compile(r"use(State|Effect|Reducer)")
_EVENT_HANDLERS = re.compile(r"onClick|onChange|onSubmit")
BROWSER_APIS = ("localStorage", "window.location", "document.getElementById")
SERVER_ONLY_MARKERS = ("getServerSideProps", "getStaticProps", "generateMetadata")

APP_ROUTER_MARKERS = (
    "export default function Page",
    "export default function Layout",
    "generateMetadata",
    "export const metadata",
)
_PAGE_EXPORT = re.compile(r"export default function (\w*Page\w*)")
_LAYOUT_EXPORT = re.compile(r"export default function (\w*Layout\w*)")

SMALL_PAGE_CHARS = 500
DEFAULT_METADATA = """\
export const metadata = {
  title: 'Page',
  description: 'Page description',
};

"""


def transform(code: str) -> str:
    code = fix_client_directives(code)
    code = fix_corrupted_imports(code)
    code = add_missing_client_directive(code)
    code = fix_directive_spacing(code)
    code = fix_app_router_patterns(code)
    return code


def _first_code_index(lines: list[str]) -> int:
    in_block_comment = False
    for index, line in enumerate(lines):
        stripped = line.strip()
        if in_block_comment:
            if "*/" in stripped:
                in_block_comment = False
            continue
        if not stripped or stripped.startswith("//"):
            continue
        if stripped.startswith("/*"):
            in_block_comment = "*/" not in stripped
            continue
        return index
    return len(lines)


def fix_client_directives(code: str) -> str:
    """Keep a single directive, placed at the first code line."""
    lines = code.split("\n")
    positions = [i for i, line in enumerate(lines) if line.strip() in _DIRECTIVE_LINES]
    if not positions:
        return code
    if len(positions) == 1 and positions[0] == _first_code_index(lines):
        return code

    body = [line for line in lines if line.strip() not in _DIRECTIVE_LINES]
    insert_at = _first_code_index(body)
    head, rest = body[:insert_at], body[insert_at:]
    return "\n".join([*head, CLIENT_DIRECTIVE, "", *rest])


def fix_corrupted_imports(code: str) -> str:
    """Flatten nested import blocks and remove duplicate import lines."""
    fixed = _NESTED_IMPORT_BLOCK.sub(
        lambda m: f'import {{ {m.group(1).strip()} }} from "{m.group(2)}"', code
    )
    fixed = _DANGLING_IMPORT_OPENER.sub("", fixed)

    seen: set[str] = set()
    kept: list[str] = []
    for line in fixed.split("\n"):
        normalized = " ".join(line.split())
        if _COMPLETE_IMPORT_LINE.match(normalized):
            if normalized in seen:
                continue
            seen.add(normalized)
        kept.append(line)
    return "\n".join(kept)


def add_missing_client_directive(code: str) -> str:
    """Add the directive only to clear, exported client components."""
    if has_client_directive(code):
        return code
    is_component = "export default function" in code or "export function" in code
    is_client = (
        bool(_CORE_HOOKS.search(code))
        or bool(_EVENT_HANDLERS.search(code))
        or any(api in code for api in BROWSER_APIS)
    )
    if not (is_component and is_client):
        return code
    if any(marker in code for marker in SERVER_ONLY_MARKERS):
        return code
    return f"{CLIENT_DIRECTIVE}\n\n{code}"


def fix_directive_spacing(code: str) -> str:
    if code.startswith(CLIENT_DIRECTIVE):
        return re.sub(r"^'use client';\n+", "'use client';\n\n", code)
    return code


def fix_app_router_patterns(code: str) -> str:
    if not any(marker in code for marker in APP_ROUTER_MARKERS):
        return code
    fixed = _PAGE_EXPORT.sub("export default function Page", code)
    fixed = _LAYOUT_EXPORT.sub("export default function Layout", fixed)

    is_small_server_page = (
        "export default function Page" in fixed
        and "export const metadata" not in fixed
        and "generateMetadata" not in fixed
        and not has_client_directive(fixed)
        and len(code) < SMALL_PAGE_CHARS
    )
    if is_small_server_page:
        fixed = DEFAULT_METADATA + fixed
    return fixed
