"""Single entry point turning an image path into watermark metadata."""


import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from config import AppConfig, load_config
from errors import ExtractionError
from providers.aliyun_ocr import AliyunOcrClient
from providers.baidu_ocr import BaiduOcrClient
from providers.qwen_vlm import QwenVlmClient
from schemas import ExtractionResult
from utils.image_io import ensure_image_path
from utils.text_cleaning import clean_location_text
from utils.time_normalizer import normalize_time
from watermark import extract_time_and_location


@dataclass
class ExtractionPipeline:
	"""Dispatches images to the configured provider and normalizes the answer.

	Provider clients are created on first use and reused afterwards, so the
	OCR access token is cached for the lifetime of the pipeline.
	"""

	config: AppConfig
	_clients: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	def process(self, image_path: str | Path, backend: str | None = None) -> ExtractionResult:
		"""Extract time and location from one image.

		Returns a skipped result when the backend has no credentials.

		Raises:
			ExtractionError: On any transport, protocol or provider failure.
		"""
		backend = backend or self.config.backend
		if backend not in ("qwen", "baidu", "aliyun"):
			raise ExtractionError(f"Unknown extraction backend: {backend}")
		# Credentials are checked before the image is touched.
		client = self._get_client(backend)
		if client is None:
			return ExtractionResult.disabled(backend)  # type: ignore[arg-type]

		try:
			path = ensure_image_path(image_path)
		except (OSError, ValueError) as exc:
			raise ExtractionError(f"Cannot read image {image_path}: {exc}") from exc
		try:
			if backend == "qwen":
				result = self._process_with_vlm(client, path)
			else:
				result = self._process_with_ocr(client, path, backend)
		except OSError as exc:
			raise ExtractionError(f"Cannot read image {path}: {exc}") from exc

		self._logger.info(
			"%s result for %s - Time: %s, Location: %s, Confidence: %s, IsStandard: %s",
			backend,
			path.name,
			result.time,
			result.location,
			"n/a" if result.confidence is None else f"{result.confidence:.2f}",
			result.is_standard,
		)
		return result

	def _process_with_vlm(self, client: QwenVlmClient, path: Path) -> ExtractionResult:
		reply = client.extract_metadata(path)
		return ExtractionResult(
			time=normalize_time(reply.time) if reply.time.strip() else "",
			location=clean_location_text(reply.location) if reply.location.strip() else "",
			backend="qwen",
			confidence=reply.confidence,
		)

	def _process_with_ocr(self, client: Any, path: Path, backend: str) -> ExtractionResult:
		fragments = client.recognize(path)
		result = extract_time_and_location(fragments, self.config.layout)
		return result.model_copy(update={"backend": backend})

	def _get_client(self, backend: str) -> Any:
		client = self._clients.get(backend)
		if client is None:
			client = self._create_client(backend)
			if client is not None:
				self._clients[backend] = client
		return client

	def _create_client(self, backend: str) -> Any:
		if backend == "qwen":
			if self.config.qwen_vlm is None:
				self._logger.warning("Qwen VLM API key not configured, skipping extraction")
				return None
			return QwenVlmClient(self.config.qwen_vlm)
		if backend == "baidu":
			if self.config.baidu is None:
				self._logger.warning("Baidu OCR credentials not configured, skipping extraction")
				return None
			return BaiduOcrClient(self.config.baidu)
		if self.config.aliyun is None:
			self._logger.warning("Aliyun OCR credentials not configured, skipping extraction")
			return None
		return AliyunOcrClient(self.config.aliyun)


def process_image(image_path: str | Path, config: AppConfig | None = None) -> ExtractionResult:
	"""Process one image with a throwaway pipeline built from ``config``."""
	return ExtractionPipeline(config or load_config()).process(image_path)
