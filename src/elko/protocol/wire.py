"""Line-delimited JSON framing.

One message per line, in both directions. A long-poll select response is
itself a single JSON object whose ``msgs`` field carries the messages.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from .. import json


def encode(message: Any) -> str:
    """Return the wire text for one *message*; text passes through as-is."""

    if isinstance(message, str):
        return message

    if hasattr(message, "to_dict"):
        message = message.to_dict()

    return json.dump_text(message)


def join(texts: Iterable[str]) -> str:
    """Join already-encoded message texts into a single transmission body."""

    return "\n".join(texts)


def split(body: str) -> List[str]:
    """Inverse of :func:`join`; blank lines are discarded."""

    return [line for line in body.split("\n") if line.strip()]


def decode(text: Optional[str]) -> Optional[dict]:
    """Parse a response body or inbound frame.

    Returns None if the text is empty, is not valid JSON, or does not
    describe a JSON object; the caller decides whether that is fatal.
    """

    if not text:
        return None

    try:
        data = json.loads(text)
    except json.errors:
        return None

    if not isinstance(data, dict):
        return None

    return data


def sequence(value: Any) -> Optional[int]:
    """Return *value* if it is usable as a sequence number, otherwise None.

    Booleans are rejected even though they are integers in Python; a server
    answering ``true`` has not provided a cursor.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        return None

    return value
