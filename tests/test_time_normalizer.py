"""Tests for watermark timestamp canonicalization."""
from __future__ import annotations

import pytest

from utils.time_normalizer import TIME_SHAPES, clean_time_text, match_time_shape, normalize_time


@pytest.mark.parametrize(
	("raw", "expected"),
	[
		("2024-01-15 14:30:45", "2024-01-15 14:30:45"),
		("2024年01月15日 14:30:45", "2024-01-15 14:30:45"),
		("20240115143045", "2024-01-15 14:30:45"),
		("20240115 143045", "2024-01-15 14:30:45"),
		("202401151430", "2024-01-15 14:30:00"),
		("20240115 1430", "2024-01-15 14:30:00"),
		("20240115", "2024-01-15 00:00:00"),
		("2023-07-2015:47", "2023-07-20 15:47:00"),
		("2023-07-915:47", "2023-07-09 15:47:00"),
		("2023-7-20 15:47", "2023-07-20 15:47:00"),
		("2023-7-20 9:47", "2023-07-20 09:47:00"),
		("2023-07-20 9:47", "2023-07-20 09:47:00"),
		("2023-7-20", "2023-07-20 00:00:00"),
		("2023-7-5 8:05:09", "2023-07-05 08:05:09"),
		("2023/7/9 9:30", "2023-07-09 09:30:00"),
		("2023/07/09 09:30:15", "2023-07-09 09:30:15"),
		("2023/7/9", "2023-07-09 00:00:00"),
		("2023/07/0915:47", "2023-07-09 15:47:00"),
		("  2024-01-15   14:30:45  ", "2024-01-15 14:30:45"),
		("2024年1月5日14:30", "2024-01-05 14:30:00"),
	],
)
def test_normalize_time_shapes(raw: str, expected: str) -> None:
	"""Each supported spelling reaches the canonical form."""
	assert normalize_time(raw) == expected


def test_slash_prefix_drops_trailing_remnant() -> None:
	"""A slash date followed by unparseable text keeps only the date."""
	assert normalize_time("2023/7/9 9:30:5") == "2023-07-09 00:00:00"


def test_no_calendar_validation() -> None:
	"""Out-of-range months are reshaped, not rejected."""
	assert normalize_time("2023-13-40 25:61") == "2023-13-40 25:61:00"


@pytest.mark.parametrize("raw", ["", "unknown", "14:30", "2024.01.15 14:30", "监测站"])
def test_unrecognized_input_passes_through(raw: str) -> None:
	"""Unknown shapes come back cleaned but unconverted."""
	assert normalize_time(raw) == raw.strip()


def test_unrecognized_input_is_still_cleaned() -> None:
	"""Glyph replacement and whitespace collapse apply even without a match."""
	assert normalize_time(" 拍摄于  2024年 ") == "拍摄于 2024-"


@pytest.mark.parametrize(
	"raw",
	["2024-01-15 14:30:45", "20240115143045", "2023/7/9 9:30", "2023-07-2015:47", "2024年01月15日"],
)
def test_normalize_time_is_idempotent(raw: str) -> None:
	"""Canonical output is a fixed point of the normalizer."""
	once = normalize_time(raw)
	assert normalize_time(once) == once


def test_shape_priority_order() -> None:
	"""Compact shapes are tried before separated ones, canonical last."""
	names = [shape.name for shape in TIME_SHAPES]
	assert names[0] == "compact_full"
	assert names[-1] == "canonical"
	assert names.index("hyphen_full") < names.index("slash_full") < names.index("slash_date_prefix")


def test_match_time_shape_reports_winning_shape() -> None:
	"""The first matching shape is reported with its rendering."""
	matched = match_time_shape("20240115 1430")
	assert matched is not None
	shape, rendered = matched
	assert shape.name == "compact_minutes_spaced"
	assert rendered == "2024-01-15 14:30:00"
	assert match_time_shape("not a time") is None


def test_clean_time_text_repairs_glue() -> None:
	"""Missing date/time separator is restored before dispatch."""
	assert clean_time_text("2023-07-2015:47") == "2023-07-20 15:47"
	assert clean_time_text("2023/7/915:47") == "2023/7/9 15:47"
