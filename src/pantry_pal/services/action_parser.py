"""Extraction of pantry actions from assistant replies."""

import logging

from pydantic import TypeAdapter, ValidationError

from pantry_pal.domain.actions import ActionPayload, PantryAction

_logger = logging.getLogger(__name__)

_PAYLOAD_ADAPTER: TypeAdapter[ActionPayload] = TypeAdapter(ActionPayload)


def find_json_span(text: str) -> tuple[int, int] | None:
    """Return ``(start, end)`` of the first ``{`` and the first ``}`` after it.

    Brace depth is not tracked, so a nested object ends the span early.
    """
    start = text.find("{")
    if start == -1:
        return None
    end = text.find("}", start)
    if end == -1:
        return None
    return start, end + 1


def parse_action(text: str) -> PantryAction | None:
    """Extract a single pantry action from free-form assistant text.

    Returns ``None`` when there is no JSON object, when it is malformed, or
    when the fields required by its ``action`` are missing or invalid.
    """
    span = find_json_span(text)
    if span is None:
        return None
    raw = text[span[0] : span[1]]
    try:
        payload = _PAYLOAD_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        _logger.debug("Ignoring non-actionable JSON (%s errors)", exc.error_count())
        return None
    return payload.to_action()


def strip_action_json(text: str) -> str:
    """Remove the embedded action object, leaving the conversational text."""
    span = find_json_span(text)
    if span is None:
        return text.strip()
    before = text[: span[0]].rstrip()
    after = text[span[1] :].lstrip()
    return " ".join(part for part in (before, after) if part)
