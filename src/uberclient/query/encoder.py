"""Turns request descriptions into URL query parameters."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from uberclient.errors import MissingRequiredField, UnsupportedFieldKind
from uberclient.query.models import Param, RequestDescription

logger = logging.getLogger(__name__)


def encode(description: RequestDescription | None) -> dict[str, str]:
    """Encode a request description into ordered key/value pairs.

    Nested descriptions are flattened into the parent; when a key appears
    more than once the first value wins. Optional fields that format to an
    empty string are dropped rather than sent as ``key=``.

    Args:
        description: Description to encode, or None for no parameters

    Returns:
        Parameters in declaration order

    Raises:
        MissingRequiredField: If a required field formats to ""
        UnsupportedFieldKind: If a field holds a value the encoder can't format
    """
    if description is None:
        return {}

    payload: dict[str, str] = {}
    for param in description.params:
        if param.skipped:
            continue

        if isinstance(param.value, RequestDescription):
            nested = encode(param.value)
            # an empty group adds nothing, not even its own key
            for key, value in nested.items():
                payload.setdefault(key, value)
            continue

        formatted = format_value(param)
        if param.required and formatted == "":
            raise MissingRequiredField(param.name)

        if formatted and param.name:
            payload.setdefault(param.name, formatted)

    return payload


def format_value(param: Param) -> str:
    """Format a scalar parameter value as it appears on the wire.

    Raises:
        UnsupportedFieldKind: If the value is not a str, int or float
    """
    value = param.value
    # bool is an int subclass but has no wire form here
    if isinstance(value, bool):
        raise UnsupportedFieldKind(param.name, type(value).__name__)
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    raise UnsupportedFieldKind(param.name, type(value).__name__)


def _format_float(value: float) -> str:
    text = repr(value)
    if text.endswith(".0"):
        return text[:-2]
    return text


def build_url(base: str, endpoint: str, description: RequestDescription | None) -> str:
    """Build ``base/endpoint`` with the encoded query appended, if any.

    The ``?`` is omitted entirely when there are no parameters.
    """
    params = encode(description)
    url = f"{base}/{endpoint}"
    if not params:
        return url

    logger.debug(f"Built {len(params)} query parameters for {endpoint}")
    return f"{url}?{urlencode(params)}"
