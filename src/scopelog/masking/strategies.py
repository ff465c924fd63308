"""Redaction transforms.

Every strategy receives the matched value already stringified and returns the
masked string. ``glyph`` is the single character written over hidden
characters; ``full_mask`` is the token used by FULL.
"""

from __future__ import annotations

import json
from typing import Any

from scopelog.masking.rules import MaskingRule
from scopelog.models.enums import MaskingStrategy

TOKEN_PREFIX = 4
TOKEN_SUFFIX = 5
VISIBLE_DIGITS = 4


def stringify(value: Any) -> str:
    """Render ``value`` as the text a strategy operates on."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def preserve_length(text: str, glyph: str) -> str:
    return glyph * len(text)


def keep_last(text: str, glyph: str, visible: int = VISIBLE_DIGITS) -> str:
    """Mask every alphanumeric character except the last ``visible`` ones.

    Separators (spaces, dashes, parentheses...) are kept in place. A value with
    no more than ``visible`` alphanumerics is masked entirely.

    Example:
        >>> keep_last("4111-1111-1111-1111", "*")
        '****-****-****-1111'
    """
    positions = [index for index, char in enumerate(text) if char.isalnum()]
    shown = set(positions[-visible:]) if len(positions) > visible else set()
    return "".join(
        char if index in shown or not char.isalnum() else glyph for index, char in enumerate(text)
    )


def mask_email(text: str, glyph: str) -> str:
    """Keep the first character of the local part and the whole ``@domain``."""
    local, at, domain = text.partition("@")
    if not at or not local:
        return preserve_length(text, glyph)
    return local[0] + glyph * (len(local) - 1) + at + domain


def mask_token(text: str, glyph: str) -> str:
    """Keep a short prefix and suffix, mask the middle.

    Example:
        >>> mask_token("sk_test_1234567890abcdef", "*")
        'sk_t***************bcdef'
    """
    if len(text) <= TOKEN_PREFIX + TOKEN_SUFFIX:
        return preserve_length(text, glyph)
    hidden = len(text) - TOKEN_PREFIX - TOKEN_SUFFIX
    return text[:TOKEN_PREFIX] + glyph * hidden + text[-TOKEN_SUFFIX:]


def apply_strategy(rule: MaskingRule, value: Any, mask_char: str, full_mask: str) -> Any:
    """Mask ``value`` with ``rule``'s strategy.

    Args:
        rule: The matched rule
        value: Original value
        mask_char: Engine-wide mask glyph, used when the rule has none
        full_mask: Engine-wide FULL replacement, used when the rule has none

    Returns:
        The masked value (a string, or whatever a CUSTOM function returns)

    Raises:
        Exception: Whatever rendering the value or a CUSTOM function raises;
            the engine recovers from it
    """
    text = stringify(value)
    strategy = rule.strategy
    if strategy is MaskingStrategy.FULL:
        return rule.mask_char or full_mask
    if strategy is MaskingStrategy.CUSTOM:
        return rule.custom(text)  # type: ignore[misc]

    glyph = (rule.mask_char or mask_char or "*")[0]
    if strategy in (MaskingStrategy.PRESERVE_LENGTH, MaskingStrategy.PASSWORD):
        return preserve_length(text, glyph)
    if strategy in (MaskingStrategy.CREDIT_CARD, MaskingStrategy.SSN, MaskingStrategy.PHONE):
        return keep_last(text, glyph)
    if strategy is MaskingStrategy.EMAIL:
        return mask_email(text, glyph)
    if strategy is MaskingStrategy.TOKEN:
        return mask_token(text, glyph)
    raise ValueError(f"Unknown masking strategy: {strategy!r}")
