"""Canonicalization of watermark timestamps read by OCR or a vision model.

Every recognized spelling is reshaped into ``YYYY-MM-DD HH:MM:SS``. The
normalizer is purely syntactic: it pads and reorders digits but never
validates the calendar, so a malformed but plausible reading such as month 13
stays recognizable instead of being dropped. Input that matches no known
shape is returned after cleaning, unconverted.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Final

_CJK_REPLACEMENTS: Final[tuple[tuple[str, str], ...]] = (("年", "-"), ("月", "-"), ("日", ""))
_WHITESPACE = re.compile(r"\s+")
# OCR often drops the space between the date and the clock: "2023-07-2015:47".
_GLUED_DATE_TIME: Final[tuple[re.Pattern[str], ...]] = (
	re.compile(r"^([0-9]{4}-[0-9]{1,2}-[0-9]{1,2})([0-9]{2}:[0-9]{2})"),
	re.compile(r"^([0-9]{4}/[0-9]{1,2}/[0-9]{1,2})([0-9]{2}:[0-9]{2})"),
)


@dataclass(frozen=True)
class TimeShape:
	"""One recognizable timestamp spelling and how to canonicalize it."""

	name: str
	pattern: re.Pattern[str]
	render: Callable[[re.Match[str]], str]

	def apply(self, text: str) -> str | None:
		match = self.pattern.match(text)
		return self.render(match) if match else None


def _pad(value: str | None) -> str:
	return (value or "0").zfill(2)


def _render_canonical(match: re.Match[str]) -> str:
	parts = match.groupdict()
	return "{year}-{month}-{day} {hour}:{minute}:{second}".format(
		year=parts["year"],
		month=_pad(parts["month"]),
		day=_pad(parts["day"]),
		hour=_pad(parts.get("hour")),
		minute=_pad(parts.get("minute")),
		second=parts.get("second") or "00",
	)


def _render_as_is(match: re.Match[str]) -> str:
	return match.group(0)


def _shape(name: str, pattern: str, render: Callable[[re.Match[str]], str] = _render_canonical) -> TimeShape:
	return TimeShape(name=name, pattern=re.compile(pattern), render=render)


_DATE = r"(?P<year>[0-9]{{4}}){sep}(?P<month>[0-9]{{1,2}}){sep}(?P<day>[0-9]{{1,2}})"
_HYPHEN_DATE = _DATE.format(sep="-")
_SLASH_DATE = _DATE.format(sep="/")
_CLOCK = r"\s+(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})"
_SECONDS = r":(?P<second>[0-9]{2})"
_COMPACT_DATE = r"(?P<year>[0-9]{4})(?P<month>[0-9]{2})(?P<day>[0-9]{2})"
_COMPACT_CLOCK = r"(?P<hour>[0-9]{2})(?P<minute>[0-9]{2})"

# Ranked: the first shape that matches decides the output.
TIME_SHAPES: Final[tuple[TimeShape, ...]] = (
	_shape("compact_full", rf"^{_COMPACT_DATE}{_COMPACT_CLOCK}(?P<second>[0-9]{{2}})$"),
	_shape("compact_full_spaced", rf"^{_COMPACT_DATE}\s+{_COMPACT_CLOCK}(?P<second>[0-9]{{2}})$"),
	_shape("compact_minutes", rf"^{_COMPACT_DATE}{_COMPACT_CLOCK}$"),
	_shape("compact_minutes_spaced", rf"^{_COMPACT_DATE}\s+{_COMPACT_CLOCK}$"),
	_shape("compact_date", rf"^{_COMPACT_DATE}$"),
	_shape("hyphen_full", rf"^{_HYPHEN_DATE}{_CLOCK}{_SECONDS}$"),
	_shape("hyphen_minutes", rf"^{_HYPHEN_DATE}{_CLOCK}$"),
	_shape("hyphen_date", rf"^{_HYPHEN_DATE}$"),
	_shape("slash_full", rf"^{_SLASH_DATE}{_CLOCK}{_SECONDS}$"),
	_shape("slash_minutes", rf"^{_SLASH_DATE}{_CLOCK}$"),
	_shape("slash_date", rf"^{_SLASH_DATE}$"),
	_shape("slash_date_prefix", rf"^{_SLASH_DATE}"),
	_shape("canonical", r"^[0-9]{4}-[0-9]{2}-[0-9]{2}\s+[0-9]{2}:[0-9]{2}:[0-9]{2}$", _render_as_is),
)


def clean_time_text(raw: str) -> str:
	"""Apply the glyph, glue and whitespace passes that precede shape dispatch."""
	text = raw
	for glyph, replacement in _CJK_REPLACEMENTS:
		text = text.replace(glyph, replacement)
	text = text.strip()
	for pattern in _GLUED_DATE_TIME:
		text = pattern.sub(r"\1 \2", text, count=1)
	return _WHITESPACE.sub(" ", text)


def match_time_shape(text: str) -> tuple[TimeShape, str] | None:
	"""Return the first shape accepting ``text`` with its rendering."""
	for shape in TIME_SHAPES:
		rendered = shape.apply(text)
		if rendered is not None:
			return shape, rendered
	return None


def normalize_time(raw: str) -> str:
	"""Normalize a timestamp spelling to ``YYYY-MM-DD HH:MM:SS``.

	Never raises; unrecognized input comes back cleaned but unconverted.
	"""
	text = clean_time_text(raw)
	matched = match_time_shape(text)
	return matched[1] if matched else text
