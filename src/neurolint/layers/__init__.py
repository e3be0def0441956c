"""Layer passes: independent text-to-text rewrites.

Each layer module exposes ``transform(code: str) -> str``.  Layers share
no state and never swallow their own errors: the pipeline is the single
place that decides "unchanged on failure".
"""
