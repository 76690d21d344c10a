"""Best-effort conversion of property text into structured values.

Property editors persist structured data (image croppers, pickers, grids) as
JSON text. When that text looks like a JSON object or array it is parsed;
anything else, including text that looks like JSON but fails to parse, is kept
verbatim. Conversion never raises.

Examples
--------
>>> convert_to_json_if_possible('{"src": "/media/1.png"}')
JsonValue(value={'src': '/media/1.png'})
>>> convert_to_json_if_possible("plain text")
RawText(text='plain text')
"""

from __future__ import annotations

import json

from contentnodes.logging import get_logger, log_debug

from .domain import JsonValue, PropertyValue, RawText

logger = get_logger(__name__)

_JSON_DELIMITERS = (("{", "}"), ("[", "]"))


def detect_is_json(text: str) -> bool:
    """Return True when ``text`` is shaped like a JSON object or array."""
    stripped = text.strip()
    return any(
        stripped.startswith(opening) and stripped.endswith(closing)
        for opening, closing in _JSON_DELIMITERS
    )


def convert_to_json_if_possible(text: str) -> PropertyValue:
    """Return ``text`` as a JSON value when it parses, else as raw text.

    Parameters
    ----------
    text : str
        Property text read from the database.

    Returns
    -------
    PropertyValue
        ``JsonValue`` holding the parsed document, or ``RawText`` holding the
        original text unchanged.
    """
    if not detect_is_json(text):
        return RawText(text)
    try:
        return JsonValue(json.loads(text))
    except ValueError as exc:
        log_debug(logger, "Keeping property text as raw text: %s", exc)
        return RawText(text)


def effective_property_text(
    primary: str | None,
    secondary: str | None,
) -> str | None:
    """Return ``primary`` unless it is blank, otherwise ``secondary``."""
    if primary is None or not primary.strip():
        return secondary
    return primary


def property_value_from_columns(
    primary: str | None,
    secondary: str | None,
) -> PropertyValue | None:
    """Build a property value from the long-text and short-text columns.

    Returns ``None`` when neither column holds a value.
    """
    text = effective_property_text(primary, secondary)
    if text is None:
        return None
    return convert_to_json_if_possible(text)


__all__ = (
    "convert_to_json_if_possible",
    "detect_is_json",
    "effective_property_text",
    "property_value_from_columns",
)
