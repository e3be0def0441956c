"""Layer 1: configuration normalization.

Sniffs whether the text is a compiler config (``tsconfig.json``), a
framework config (``next.config.js``) or a package manifest
(``package.json``) and rewrites known fields to fixed modern defaults.
JSON inputs are rewritten structurally: parsed, merged, re-serialised
with two-space indentation.  Unrecognised text passes through unchanged.
"""

from __future__ import annotations

import json
import re
from typing import Any

from neurolint.layers.base import LayerError

MODERN_COMPILER_OPTIONS: dict[str, Any] = {
    "target": "ES2022",
    "lib": ["dom", "dom.iterable", "ES2022"],
    "allowJs": True,
    "allowSyntheticDefaultImports": True,
    "esModuleInterop": True,
    "forceConsistentCasingInFileNames": True,
    "incremental": True,
    "isolatedModules": True,
    "jsx": "preserve",
    "module": "esnext",
    "moduleResolution": "node",
    "noEmit": True,
    "resolveJsonModule": True,
    "skipLibCheck": True,
    "strict": True,
    "exactOptionalPropertyTypes": True,
    "noImplicitReturns": True,
    "noFallthroughCasesInSwitch": True,
    "noUncheckedIndexedAccess": True,
    "baseUrl": ".",
    "paths": {
        "@/*": ["./src/*"],
        "~/*": ["./public/*"],
    },
}

DEFAULT_INCLUDE = ["next-env.d.ts", "**/*.ts", "**/*.tsx"]
DEFAULT_EXCLUDE = ["node_modules"]

STANDARD_SCRIPTS: dict[str, str] = {
    "dev": "next dev",
    "build": "next build",
    "start": "next start",
    "lint": "next lint",
    "lint:fix": "next lint --fix",
    "type-check": "tsc --noEmit",
    "format": "prettier --write .",
    "format:check": "prettier --check .",
}

MIN_NODE_VERSION = ">=18.0.0"

FRAMEWORK_CONFIG_TEMPLATE = """\
/** @type {import('next').NextConfig} */
const nextConfig = {
  experimental: {
    appDir: true,
  },
  typescript: {
    ignoreBuildErrors: false,
  },
  eslint: {
    ignoreDuringBuilds: false,
  },
  swcMinify: true,
  reactStrictMode: true,
  poweredByHeader: false,
  compress: true,
  images: {
    formats: ['image/webp', 'image/avif'],
    minimumCacheTTL: 60,
  },
}

module.exports = nextConfig"""

# module.exports alone is any CommonJS module; require a framework-config key too.
_FRAMEWORK_HINT = re.compile(
    r"\b(reactStrictMode|swcMinify|experimental|poweredByHeader|images)\s*:"
)


def transform(code: str) -> str:
    kind = sniff(code)
    if kind == "compiler":
        return _fix_compiler_config(code)
    if kind == "framework":
        return FRAMEWORK_CONFIG_TEMPLATE
    if kind == "manifest":
        return _fix_package_manifest(code)
    return code


def sniff(code: str) -> str | None:
    """Classify *code* as ``compiler``, ``framework``, ``manifest`` or None."""
    is_json_object = code.lstrip().startswith("{")
    if is_json_object and "compilerOptions" in code:
        return "compiler"
    if "nextConfig" in code or ("module.exports" in code and _FRAMEWORK_HINT.search(code)):
        return "framework"
    if is_json_object and '"scripts"' in code:
        return "manifest"
    return None


def _load_object(code: str, label: str) -> dict[str, Any]:
    try:
        data = json.loads(code)
    except json.JSONDecodeError as exc:
        raise LayerError(f"Invalid JSON in {label}: {exc}") from exc
    if not isinstance(data, dict):
        raise LayerError(f"Expected a JSON object in {label}")
    return data


def _dump(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _fix_compiler_config(code: str) -> str:
    config = _load_object(code, "compiler config")
    existing = config.get("compilerOptions") or {}
    config["compilerOptions"] = {**existing, **MODERN_COMPILER_OPTIONS}
    if "include" not in config:
        config["include"] = list(DEFAULT_INCLUDE)
    if "exclude" not in config:
        config["exclude"] = list(DEFAULT_EXCLUDE)
    return _dump(config)


def _fix_package_manifest(code: str) -> str:
    manifest = _load_object(code, "package manifest")
    manifest["scripts"] = {**(manifest.get("scripts") or {}), **STANDARD_SCRIPTS}
    engines = manifest.get("engines") or {}
    engines["node"] = MIN_NODE_VERSION
    manifest["engines"] = engines
    return _dump(manifest)
