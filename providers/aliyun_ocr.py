"""Aliyun OCR provider implementation."""


import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from alibabacloud_ocr_api20210707 import models as ocr_models
from alibabacloud_ocr_api20210707.client import Client as OcrClient
from alibabacloud_tea_openapi import models as open_api_models
from alibabacloud_tea_util import models as util_models
from Tea.exceptions import TeaException

from config import AliyunCredentials
from errors import ProtocolError, ProviderError, TransportError
from schemas import BoundingBox, TextFragment
from utils.image_io import read_image_bytes

DEFAULT_TIMEOUT: Final[float] = 30.0

JsonDict = dict[str, Any]


@dataclass
class AliyunOcrClient:
	"""Client wrapper around the Aliyun RecognizeGeneral API."""

	credentials: AliyunCredentials
	timeout: float = DEFAULT_TIMEOUT

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)
		self._client = self._create_client()

	def recognize(self, image_path: Path) -> list[TextFragment]:
		"""Run general OCR on the image and return its positioned text fragments."""
		request = ocr_models.RecognizeGeneralRequest(body=io.BytesIO(read_image_bytes(image_path)))
		timeout_ms = int(self.timeout * 1000)
		runtime = util_models.RuntimeOptions(read_timeout=timeout_ms, connect_timeout=timeout_ms)
		try:
			response = self._client.recognize_general_with_options(request, runtime)
		except TeaException as exc:
			raise ProviderError(f"Aliyun OCR error: {exc.message}", code=exc.code) from exc
		except Exception as exc:  # noqa: BLE001
			raise TransportError(f"Aliyun OCR call failed: {exc}") from exc

		fragments = self._parse_fragments(self._to_dict(response))
		self._logger.info("Aliyun OCR returned %s fragments for %s", len(fragments), image_path.name)
		return fragments

	def _create_client(self) -> Any:
		config = open_api_models.Config(
			access_key_id=self.credentials.access_key_id,
			access_key_secret=self.credentials.access_key_secret,
			region_id=self.credentials.region_id,
			endpoint=f"ocr-api.{self.credentials.region_id}.aliyuncs.com",
		)
		return OcrClient(config)

	def _to_dict(self, response: Any) -> JsonDict:
		if hasattr(response, "to_map"):
			return response.to_map()
		if isinstance(response, dict):
			return response
		return {"body": response} if response is not None else {}

	def _parse_fragments(self, payload: JsonDict) -> list[TextFragment]:
		data = self._extract_data(payload)
		fragments: list[TextFragment] = []
		for item in self._collect_candidates(data):
			text = self._extract_text(item)
			if not text:
				continue
			fragments.append(TextFragment(text=text, bounding_box=self._extract_box(item)))
		return fragments

	def _extract_data(self, payload: JsonDict) -> JsonDict:
		body = payload.get("body") if isinstance(payload, dict) else None
		if not isinstance(body, dict):
			raise ProtocolError("Aliyun OCR response has no body")
		data = body.get("Data")
		if isinstance(data, str):
			try:
				data = json.loads(data)
			except ValueError as exc:
				raise ProtocolError(f"Aliyun OCR Data is not valid JSON: {data[:200]!r}") from exc
		if not isinstance(data, dict):
			raise ProtocolError("Aliyun OCR response has no Data object")
		return data

	def _collect_candidates(self, data: JsonDict) -> list[JsonDict]:
		for key in ("prism_wordsInfo", "PrismWordsInfo"):
			items = data.get(key)
			if isinstance(items, list):
				return [item for item in items if isinstance(item, dict)]
		return []

	def _extract_text(self, item: JsonDict) -> str:
		for key in ("word", "Word", "text", "Text"):
			value = item.get(key)
			if isinstance(value, str) and value.strip():
				return value.strip()
		return ""

	def _extract_box(self, item: JsonDict) -> BoundingBox:
		if all(isinstance(item.get(key), (int, float)) for key in ("x", "y")):
			return BoundingBox(
				left=int(item["x"]),
				top=int(item["y"]),
				width=int(item.get("width") or 0),
				height=int(item.get("height") or 0),
			)
		points = item.get("pos")
		if isinstance(points, list) and points and all(isinstance(point, dict) for point in points):
			xs = [int(point.get("x", 0)) for point in points]
			ys = [int(point.get("y", 0)) for point in points]
			return BoundingBox(left=min(xs), top=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))
		return BoundingBox()
