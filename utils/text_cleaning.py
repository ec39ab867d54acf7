"""Whitespace cleanup for free-text watermark fields."""


def clean_location_text(raw: str) -> str:
	"""Trim the text and collapse internal whitespace runs to one space."""
	return " ".join(raw.split())
