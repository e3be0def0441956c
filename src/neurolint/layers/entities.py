"""Layer 2: entity normalization.

Replaces markup-escaped sequences with literal characters using an
explicit, ordered substitution table.

INVARIANT: the ampersand-unescape rule runs LAST.  Running it earlier
would turn ``&amp;quot;`` into ``&quot;`` and leave a second escape for
the next pass, so the layer would not reach its fixed point in one
application.  Doubly-escaped prefixes are collapsed FIRST for the same
reason.
"""

from __future__ import annotations

import re
from typing import NamedTuple


class EntityRule(NamedTuple):
    pattern: re.Pattern[str]
    replacement: str
    repeat: bool = False


def _rule(pattern: str, replacement: str, *, repeat: bool = False) -> EntityRule:
    return EntityRule(re.compile(pattern), replacement, repeat)


_AMPERSAND = r"(?:&amp;|&#38;|&#x26;)"

# &amp;amp;quot; -> &amp;quot; -> &quot;
_AMPERSAND_COLLAPSE = [
    _rule(_AMPERSAND + r"(?=(?:#\d+|#x[0-9a-fA-F]+|[a-zA-Z][a-zA-Z0-9]*);)", "&", repeat=True),
]

_QUOTES_AND_MARKUP = [
    _rule(r"&quot;|&#34;|&#x22;", '"'),
    _rule(r"&#x27;|&apos;|&#39;", "'"),
    _rule(r"&lt;|&#60;|&#x3[cC];", "<"),
    _rule(r"&gt;|&#62;|&#x3[eE];", ">"),
]

_CURRENCY = [
    _rule(r"&#36;|&#x24;", "$"),
    _rule(r"&euro;|&#8364;|&#x20AC;", "€"),
    _rule(r"&pound;|&#163;", "£"),
    _rule(r"&yen;|&#165;", "¥"),
    _rule(r"&cent;|&#162;", "¢"),
]

_TYPOGRAPHY = [
    _rule(r"&ndash;|&#8211;", "–"),
    _rule(r"&mdash;|&#8212;", "—"),
    _rule(r"&lsquo;|&rsquo;|&#8216;|&#8217;", "'"),
    _rule(r"&ldquo;|&rdquo;|&#8220;|&#8221;", '"'),
    _rule(r"&hellip;|&#8230;", "…"),
    _rule(r"&#8209;", "-"),
]

_SPECIAL = [
    _rule(r"&#64;", "@"),
    _rule(r"&nbsp;|&#160;", " "),
    _rule(r"&copy;|&#169;", "©"),
    _rule(r"&reg;|&#174;", "®"),
    _rule(r"&trade;|&#8482;", "™"),
    _rule(r"&sect;|&#167;", "§"),
    _rule(r"&para;|&#182;", "¶"),
    _rule(r"&bull;|&#8226;", "•"),
    _rule(r"&deg;|&#176;", "°"),
]

_MATH = [
    _rule(r"&plusmn;|&#177;", "±"),
    _rule(r"&times;|&#215;", "×"),
    _rule(r"&divide;|&#247;", "÷"),
    _rule(r"&frac14;", "¼"),
    _rule(r"&frac12;", "½"),
    _rule(r"&frac34;", "¾"),
]

_ARROWS = [
    _rule(r"&larr;", "←"),
    _rule(r"&uarr;", "↑"),
    _rule(r"&rarr;", "→"),
    _rule(r"&darr;", "↓"),
    _rule(r"&harr;", "↔"),
]

AMPERSAND_RULE = _rule(_AMPERSAND, "&")

ENTITY_TABLE: tuple[EntityRule, ...] = (
    *_AMPERSAND_COLLAPSE,
    *_QUOTES_AND_MARKUP,
    *_CURRENCY,
    *_TYPOGRAPHY,
    *_SPECIAL,
    *_MATH,
    *_ARROWS,
    AMPERSAND_RULE,
)

assert ENTITY_TABLE[-1] is AMPERSAND_RULE, "ampersand unescape must be the last rule"


def _apply(rule: EntityRule, text: str) -> str:
    if not rule.repeat:
        return rule.pattern.sub(rule.replacement, text)
    while True:
        replaced = rule.pattern.sub(rule.replacement, text)
        if replaced == text:
            return replaced
        text = replaced


def transform(code: str) -> str:
    if "&" not in code:
        return code
    for rule in ENTITY_TABLE:
        code = _apply(rule, code)
    return code
