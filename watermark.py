"""Picking the timestamp and the location out of positioned OCR fragments.

OCR services only find text. The monitoring photos carry their watermark
in the top-right (time) and bottom-right (station) corners, so fragments are
split into a top and a bottom band before searching, and the whole image is
searched again only when the expected band comes up empty.
"""
from __future__ import annotations

import logging
import re
from typing import Final, Sequence

from config import LayoutSettings
from schemas import ExtractionResult, SpatialBands, TextFragment
from utils.text_cleaning import clean_location_text
from utils.time_normalizer import normalize_time

_logger = logging.getLogger(__name__)

_DATE_SEPARATED = r"[0-9]{4}[-/年][0-9]{1,2}[-/月][0-9]{1,2}日?"

# Ranked: full precision, minutes only, compact with seconds, compact without, date only.
TIME_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
	re.compile(rf"{_DATE_SEPARATED}\s*[0-9]{{1,2}}:[0-9]{{2}}:[0-9]{{2}}"),
	re.compile(rf"{_DATE_SEPARATED}\s*[0-9]{{1,2}}:[0-9]{{2}}"),
	re.compile(r"(?<![0-9])[0-9]{8}\s?[0-9]{6}(?![0-9])"),
	re.compile(r"(?<![0-9])[0-9]{8}\s?[0-9]{4}(?![0-9])"),
	re.compile(_DATE_SEPARATED),
)


def partition_bands(fragments: Sequence[TextFragment], divisor: int = 3) -> SpatialBands:
	"""Split fragments into top and bottom bands by their ``top`` coordinate.

	The bands cover ``1/divisor`` of the observed top range each. When every
	fragment shares the same ``top`` the range is zero and each fragment falls
	into both bands.
	"""
	if not fragments:
		return SpatialBands()
	tops = [fragment.bounding_box.top for fragment in fragments]
	min_top, max_top = min(tops), max(tops)
	threshold = (max_top - min_top) // divisor
	return SpatialBands(
		top=[fragment for fragment in fragments if fragment.bounding_box.top <= min_top + threshold],
		bottom=[fragment for fragment in fragments if fragment.bounding_box.top >= max_top - threshold],
	)


def search_time(fragments: Sequence[TextFragment]) -> str:
	"""Return the first timestamp-shaped substring, fragment order first."""
	for fragment in fragments:
		for pattern in TIME_PATTERNS:
			match = pattern.search(fragment.text)
			if match:
				return match.group(0)
	return ""


def search_location(fragments: Sequence[TextFragment], keywords: Sequence[str]) -> str:
	"""Return the text of the first fragment containing a place keyword."""
	for fragment in fragments:
		if any(keyword in fragment.text for keyword in keywords):
			return fragment.text
	return ""


def find_time_text(bands: SpatialBands, fragments: Sequence[TextFragment]) -> str:
	raw = search_time(bands.top) or search_time(fragments)
	return normalize_time(raw) if raw else ""


def find_location_text(bands: SpatialBands, fragments: Sequence[TextFragment], keywords: Sequence[str]) -> str:
	raw = search_location(bands.bottom, keywords) or search_location(fragments, keywords)
	return clean_location_text(raw) if raw else ""


def extract_time_and_location(
	fragments: Sequence[TextFragment],
	layout: LayoutSettings | None = None,
) -> ExtractionResult:
	"""Build an ``ExtractionResult`` from one image's OCR fragments."""
	layout = layout or LayoutSettings()
	bands = partition_bands(fragments, layout.band_divisor)
	_logger.debug(
		"Partitioned %s fragments into %s top / %s bottom",
		len(fragments),
		len(bands.top),
		len(bands.bottom),
	)
	return ExtractionResult(
		time=find_time_text(bands, fragments),
		location=find_location_text(bands, fragments, layout.location_keywords),
	)
