"""Gatekeeper that keeps corrupt or non-calendar payloads out of the cache."""

import logging

from icalendar import Calendar

logger = logging.getLogger(__name__)

ROOT_COMPONENT_NAME = "vcalendar"


def is_valid_icalendar(text: str) -> bool:
    """Return True iff ``text`` parses and its root component is a VCALENDAR.

    Only the top-level container is checked; individual events are not
    validated. Parse failures of any kind yield False.
    """
    try:
        component = Calendar.from_ical(text)
    except Exception as e:
        logger.debug("iCalendar parse failed: %s", e)
        return False

    name = getattr(component, "name", None) or ""
    return name.lower() == ROOT_COMPONENT_NAME
