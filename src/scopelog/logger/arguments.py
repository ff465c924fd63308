"""Log-call argument normalization.

Logger methods accept the loose shapes people actually write::

    await logger.info("user %s logged in", user_id)
    await logger.info({"user_id": user_id}, "logged in")
    await logger.error(exc)
    await logger.error({"order": order_id}, exc)

``normalize_log_call`` turns any of them into one ``LogCall`` and
``format_message`` renders the message, so the rest of the pipeline never
deals with argument shapes.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Sequence

from scopelog.models.entry import LogCall

ERROR_FIELD = "err"

_PLACEHOLDER = re.compile(r"%[sdifjo%]")


def normalize_log_call(args: Sequence[Any]) -> LogCall:
    """Resolve a logger method's positional arguments into a ``LogCall``.

    A leading mapping becomes the metadata. A leading exception (after the
    optional mapping) is stored under ``err`` and its text becomes the message
    unless more arguments follow. A leading string is the template; anything
    after it is interpolated.

    Example:
        >>> normalize_log_call(({"a": 1}, "hello %s", "bob"))
        LogCall(metadata={'a': 1}, template='hello %s', args=('bob',))
    """
    remaining = list(args)
    metadata: dict[str, Any] = {}
    if remaining and isinstance(remaining[0], Mapping):
        metadata = {str(key): value for key, value in remaining.pop(0).items()}

    if remaining and isinstance(remaining[0], BaseException):
        error = remaining.pop(0)
        metadata.setdefault(ERROR_FIELD, error)
        if not remaining:
            return LogCall(metadata=metadata, template=str(error) or type(error).__name__)

    if remaining and isinstance(remaining[0], str):
        return LogCall(metadata=metadata, template=remaining[0], args=tuple(remaining[1:]))
    return LogCall(metadata=metadata, template="", args=tuple(remaining))


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _convert(token: str, value: Any) -> str:
    if token in ("%d", "%i"):
        try:
            return str(int(value))
        except (TypeError, ValueError):
            return _text(value)
    if token == "%f":
        try:
            return str(float(value))
        except (TypeError, ValueError):
            return _text(value)
    if token in ("%j", "%o"):
        return json.dumps(value, default=str)
    return _text(value)


def format_message(template: str, args: Sequence[Any] = ()) -> str:
    """Interpolate ``args`` into ``template``.

    Supports ``%s``, ``%d``, ``%i``, ``%f``, ``%j``/``%o`` (JSON) and ``%%``.
    Placeholders without a matching argument are left as written; arguments
    without a placeholder are appended, separated by spaces.

    Example:
        >>> format_message("%s has %d items", ["cart", 3, "extra"])
        'cart has 3 items extra'
    """
    pending = list(args)

    def replace(match: re.Match[str]) -> str:
        token = match.group()
        if token == "%%":
            return "%"
        if not pending:
            return token
        return _convert(token, pending.pop(0))

    message = _PLACEHOLDER.sub(replace, template) if pending or "%%" in template else template
    if pending:
        extra = [_text(value) for value in pending]
        message = " ".join([message, *extra] if message else extra)
    return message
