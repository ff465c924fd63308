"""Masking: recursive redaction of sensitive values before they are logged."""

from scopelog.masking.engine import MaskingEngine
from scopelog.masking.rules import DEFAULT_RULES, ExactKey, KeyPattern, MaskingRule
from scopelog.models.enums import MaskingStrategy

__all__ = [
    "DEFAULT_RULES",
    "ExactKey",
    "KeyPattern",
    "MaskingEngine",
    "MaskingRule",
    "MaskingStrategy",
]
