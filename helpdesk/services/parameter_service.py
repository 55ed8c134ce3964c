"""Normalization of Dialogflow slot values.

Dialogflow reports a parameter as a plain string, a named-entity object
(``{"name": ..., "original": ...}``), a list for ``is_list`` parameters, or
leaves it out entirely. Every extractor goes through ``unwrap_slot_value`` so
the handlers only ever see ``str`` or ``None``.
"""

import math
from typing import Any, Iterable, Mapping, Optional

ENTITY_FIELDS = ("name", "original", "displayName")

NAME_KEYS = ("name", "person", "given-name")
EMAIL_KEYS = ("email", "emailAddress", "email-address")
MESSAGE_KEYS = ("problem", "issue", "message", "problem-description", "customer_message")
RATING_KEYS = ("rating", "score", "feedback-rating")
TOPIC_KEYS = ("topic", "subject", "faq-topic")


def unwrap_slot_value(value: Any) -> Optional[str]:
    """Collapse a slot value to a trimmed string, or None when absent/blank."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, Mapping):
        for field in ENTITY_FIELDS:
            unwrapped = unwrap_slot_value(value.get(field))
            if unwrapped:
                return unwrapped
        return None
    if isinstance(value, (list, tuple)):
        for item in value:
            unwrapped = unwrap_slot_value(item)
            if unwrapped:
                return unwrapped
        return None
    return None


def _first_present(parameters: Optional[Mapping[str, Any]], keys: Iterable[str], default: Any = None) -> Optional[str]:
    params = parameters or {}
    for key in keys:
        value = unwrap_slot_value(params.get(key))
        if value:
            return value
    return unwrap_slot_value(default)


def extract_name(parameters: Optional[Mapping[str, Any]], default: Any = None) -> Optional[str]:
    # "person" is a sys.person entity: unwrap covers person.name / person.original
    return _first_present(parameters, NAME_KEYS, default)


def extract_email(parameters: Optional[Mapping[str, Any]], default: Any = None) -> Optional[str]:
    return _first_present(parameters, EMAIL_KEYS, default)


def extract_message(parameters: Optional[Mapping[str, Any]], fallback_text: Any = None) -> Optional[str]:
    return _first_present(parameters, MESSAGE_KEYS, fallback_text)


def extract_topic(parameters: Optional[Mapping[str, Any]], fallback_text: Any = None) -> Optional[str]:
    return _first_present(parameters, TOPIC_KEYS, fallback_text)


def coerce_rating(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = unwrap_slot_value(value)
        if text is None:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def extract_rating(parameters: Optional[Mapping[str, Any]], default: Any = None) -> Optional[float]:
    """Coerce the first rating key that carries a value; an unparsable value is not skipped."""
    params = parameters or {}
    for key in RATING_KEYS:
        value = params.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return coerce_rating(value)
    return coerce_rating(default)
