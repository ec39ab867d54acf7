"""Command-line interface for extracting watermark time and location."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from config import BACKENDS, AppConfig, configure_logging, load_config
from errors import ExtractionError
from pipeline import ExtractionPipeline
from schemas import ExtractionResult
from stations import find_nearest_station, load_stations
from utils.io_json import build_result_payload, dump_result


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
	"""Parse command-line arguments."""
	parser = argparse.ArgumentParser(description="Weather photo watermark extraction CLI")
	parser.add_argument("--image", nargs="+", required=True, help="Path(s) to the image file(s)")
	parser.add_argument("--backend", choices=BACKENDS, default=None, help="Override EXTRACTION_BACKEND")
	parser.add_argument("--outdir", default=None, help="Directory to store JSON outputs (default: OCR_OUTPUT_DIR)")
	parser.add_argument("--stations", default=None, help="JSON file with stations for the nearest-station lookup")
	parser.add_argument("--longitude", type=float, default=None, help="Capture longitude for the nearest-station lookup")
	parser.add_argument("--latitude", type=float, default=None, help="Capture latitude for the nearest-station lookup")
	args = parser.parse_args(argv)
	coordinates = (args.longitude, args.latitude)
	if args.stations and None in coordinates:
		parser.error("--stations requires --longitude and --latitude")
	return args


def nearest_station_payload(args: argparse.Namespace) -> dict[str, Any] | None:
	"""Resolve the nearest station when a station file was supplied."""
	if not args.stations:
		return None
	station = find_nearest_station(load_stations(Path(args.stations)), args.longitude, args.latitude)
	return station.model_dump() if station else None


def run(args: argparse.Namespace, config: AppConfig) -> tuple[list[dict[str, Any]], int]:
	"""Execute extraction for every image; return the payloads and the failure count."""
	output_dir = Path(args.outdir).expanduser().resolve() if args.outdir else config.output_dir
	pipeline = ExtractionPipeline(config)
	station = nearest_station_payload(args)
	payloads: list[dict[str, Any]] = []
	failures = 0

	for image in args.image:
		try:
			result = pipeline.process(image, backend=args.backend)
			error = None
		except ExtractionError as exc:
			# Image is kept without metadata, like an upload whose extraction failed.
			logging.exception("Extraction failed for %s: %s", image, exc)
			result = ExtractionResult(backend=args.backend or config.backend)
			error = str(exc)
			failures += 1

		payload = build_result_payload(image, result, error, station)
		output_path = dump_result(payload, output_dir)
		logging.info("Saved extraction output to %s", output_path)
		print(json.dumps(payload, ensure_ascii=False, indent=2))
		payloads.append(payload)
	return payloads, failures


def main(argv: list[str] | None = None) -> int:
	"""Entry point for the CLI application."""
	try:
		config = load_config()
	except ValueError as exc:
		configure_logging()
		logging.error("Invalid configuration: %s", exc)
		return 1
	configure_logging(config.log_level)
	args = parse_arguments(argv)
	try:
		_, failures = run(args, config)
	except Exception as exc:  # noqa: BLE001
		logging.exception("Watermark extraction failed: %s", exc)
		return 1
	return 1 if failures else 0


if __name__ == "__main__":
	raise SystemExit(main())
