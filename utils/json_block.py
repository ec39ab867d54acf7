"""Recovery of the JSON object embedded in a vision model completion.

Models asked for strict JSON still wrap it in code fences or add a sentence
around it. The heuristics here handle that, and only that: strip a fence,
then keep the span from the first ``{`` to the last ``}``. Good enough for
well-behaved models, not a general JSON-in-text parser.
"""
from __future__ import annotations

from pydantic import ValidationError

from errors import ProtocolError
from schemas import StructuredVlmReply

FENCE = "```"
_RAW_PREVIEW_LIMIT = 200


def sanitize_json_block(raw: str) -> str:
	"""Return the JSON candidate contained in ``raw``."""
	trimmed = raw.strip()
	if trimmed.startswith(FENCE):
		trimmed = trimmed.removeprefix(f"{FENCE}json").removeprefix(FENCE).strip()
		closing = trimmed.rfind(FENCE)
		if closing != -1:
			trimmed = trimmed[:closing]
		trimmed = trimmed.strip()

	start = trimmed.find("{")
	end = trimmed.rfind("}")
	if start >= 0 and end > start:
		return trimmed[start : end + 1]
	return trimmed


def parse_vlm_reply(raw: str) -> StructuredVlmReply:
	"""Decode a completion into a ``StructuredVlmReply``.

	Raises:
		ProtocolError: If no JSON object can be decoded from ``raw``.
	"""
	candidate = sanitize_json_block(raw)
	if not candidate:
		raise ProtocolError("No JSON block found in VLM response")
	try:
		return StructuredVlmReply.model_validate_json(candidate)
	except ValidationError as exc:
		preview = raw if len(raw) <= _RAW_PREVIEW_LIMIT else f"{raw[:_RAW_PREVIEW_LIMIT]}..."
		raise ProtocolError(f"Failed to decode VLM JSON: {exc.errors()[0]['msg']}; raw reply: {preview!r}") from exc
