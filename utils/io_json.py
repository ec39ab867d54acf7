"""JSON persistence utilities for extraction outputs."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from schemas import ExtractionResult

DATE_PATTERN = "%Y%m%d_%H%M%S"

def build_result_payload(
	image: str | Path,
	result: ExtractionResult,
	error: str | None = None,
	nearest_station: dict[str, Any] | None = None,
) -> dict[str, Any]:
	"""Flatten one image's extraction result into a JSON-ready record."""
	payload: dict[str, Any] = {"image": str(image), **result.model_dump(), "error": error}
	if nearest_station is not None:
		payload["nearest_station"] = nearest_station
	return payload

def build_output_path(output_dir: Path, image: str | Path, backend: str | None) -> Path:
	"""Compose ``<backend>_<image stem>_<utc timestamp>.json`` within the output directory."""
	timestamp = datetime.now(timezone.utc).strftime(DATE_PATTERN)
	return output_dir.joinpath(f"{backend or 'none'}_{Path(image).stem}_{timestamp}.json")

def dump_result(payload: dict[str, Any], output_dir: Path) -> Path:
	"""Persist an extraction record as formatted JSON in the output directory."""
	output_dir.mkdir(parents=True, exist_ok=True)
	path = build_output_path(output_dir, payload["image"], payload.get("backend"))
	path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
	return path
