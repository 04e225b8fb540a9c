"""
Normalizer for raw filter buffers.

The builder appends connectives and brackets blindly, and drops conditions whose
value is absent. What is left can contain empty groups, dangling or doubled
connectives, and groups that lost the connective to their neighbour. `normalize`
rewrites such a buffer into a minimal valid expression:

    >>> normalize('(title~"fo " || content~"fo " || ) && notebook!="x"')
    '(title~"fo " || content~"fo ") && notebook!="x"'
    >>> normalize('() && status="active"')
    'status="active"'

Rules are applied in a fixed order to the whole string, and the full rule list
is repeated until a pass changes nothing. Removing one artifact can expose
another (an empty group leaves a dangling connective behind), so a single pass
is not enough.

Quoted literals are swapped for placeholders while the rules run, so brackets,
connectives and whitespace inside values are never touched.
"""

from __future__ import annotations

import logging
import re

from .operators import SYMBOLS

logger = logging.getLogger(__name__)

_CONNECTIVE = r"(?:&&|\|\|)"
_FIELD = r"@?[A-Za-z_][\w.:]*"
_OPERATOR = "(?:" + "|".join(re.escape(symbol) for symbol in SYMBOLS) + ")"

_LITERAL = re.compile(r'"[^"]*"')
_SENTINEL = "\ue000"
_SLOT = re.compile(_SENTINEL + r"(\d+)" + _SENTINEL)

# (pattern, replacement), applied in this order on every pass.
_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # empty group
    (re.compile(r"\(\s*\)"), ""),
    # connective right before a closing bracket
    (re.compile(rf"\s*{_CONNECTIVE}\s*\)"), ")"),
    # connective right after an opening bracket
    (re.compile(rf"\(\s*{_CONNECTIVE}\s*"), "("),
    # two connectives in a row: the second one wins
    (re.compile(rf"{_CONNECTIVE}\s*(&&|\|\|)"), r"\1"),
    # leading / trailing connective
    (re.compile(rf"^\s*{_CONNECTIVE}\s*"), ""),
    (re.compile(rf"\s*{_CONNECTIVE}\s*$"), ""),
    # group directly followed by a condition
    (re.compile(rf"\)\s*(?={_FIELD}\s*{_OPERATOR})"), ") && "),
    # spacing
    (re.compile(r"\s*(&&|\|\|)\s*"), r" \1 "),
    (re.compile(r"\s+"), " "),
)


def _shield_literals(text: str) -> tuple[str, list[str]]:
    if _SENTINEL in text:
        # Cannot tell our placeholders from the caller's text; rewrite as-is.
        return text, []
    literals: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        literals.append(match.group(0))
        return f"{_SENTINEL}{len(literals) - 1}{_SENTINEL}"

    return _LITERAL.sub(_stash, text), literals


def _restore_literals(text: str, literals: list[str]) -> str:
    if not literals:
        return text
    return _SLOT.sub(lambda m: literals[int(m.group(1))], text)


def _balance_brackets(text: str) -> str:
    """Drop unmatched `)` and close any `(` left open at the end."""
    depth = 0
    kept: list[str] = []
    for ch in text:
        if ch == ")":
            if depth == 0:
                continue
            depth -= 1
        elif ch == "(":
            depth += 1
        kept.append(ch)
    return "".join(kept) + ")" * depth


def _rewrite_pass(text: str) -> str:
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def normalize(raw: str) -> str:
    """
    Rewrite a raw filter buffer into a minimal filter expression.

    Pure function. The result is a fixed point of the rewrite rules, so
    `normalize(normalize(x)) == normalize(x)` for any `x`. A buffer holding only
    connectives and/or empty groups becomes `""`.

    Groups are balanced outside quoted literals only. Brackets inside a value
    are kept verbatim, so `a="("` normalizes to itself even though the raw
    character counts of `(` and `)` differ.
    """
    if not raw:
        return ""
    text, literals = _shield_literals(raw)
    balanced = _balance_brackets(text)
    if balanced != text:
        logger.debug("Unbalanced brackets in filter buffer; repaired")
        text = balanced

    max_passes = len(text) + 2
    for passes in range(1, max_passes + 1):
        rewritten = _rewrite_pass(text)
        if rewritten == text:
            break
        text = rewritten
    else:
        logger.warning(f"Filter normalization did not settle after {max_passes} passes")

    result = _restore_literals(text, literals)
    logger.debug(f"Normalized filter in {passes} passes: {result!r}")
    return result


def is_normalized(text: str) -> bool:
    """True when `text` is already in normalized form."""
    return normalize(text) == text
