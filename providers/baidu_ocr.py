"""Baidu general OCR provider implementation."""


import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

import requests

from config import BaiduCredentials
from errors import ProtocolError, ProviderError, TransportError
from providers.token_cache import AccessTokenCache
from schemas import BoundingBox, TextFragment
from utils.image_io import read_image_base64

TOKEN_URL: Final[str] = "https://aip.baidubce.com/oauth/2.0/token"
DEFAULT_TIMEOUT: Final[float] = 30.0
# Error codes the service uses for an invalid or expired access token.
TOKEN_ERROR_CODES: Final[frozenset[int]] = frozenset({110, 111})

JsonDict = dict[str, Any]


@dataclass
class BaiduOcrClient:
	"""Client wrapper around the Baidu OCR REST API."""

	credentials: BaiduCredentials
	token_cache: AccessTokenCache | None = None
	timeout: float = DEFAULT_TIMEOUT
	session: requests.Session = field(default_factory=requests.Session)

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)
		if self.token_cache is None:
			self.token_cache = AccessTokenCache(self._fetch_token)

	def recognize(self, image_path: Path) -> list[TextFragment]:
		"""Run general OCR on the image and return its positioned text fragments."""
		token = self.token_cache.get_valid_token()
		payload = self._post(
			self.credentials.ocr_url,
			params={"access_token": token},
			data={"image": read_image_base64(image_path)},
			headers={"Content-Type": "application/x-www-form-urlencoded"},
		)
		self._raise_for_error(payload)
		fragments = self._parse_fragments(payload)
		self._logger.info("Baidu OCR returned %s fragments for %s", len(fragments), image_path.name)
		return fragments

	def _fetch_token(self) -> tuple[str, float]:
		payload = self._post(
			TOKEN_URL,
			params={
				"grant_type": "client_credentials",
				"client_id": self.credentials.api_key,
				"client_secret": self.credentials.secret_key,
			},
		)
		token = payload.get("access_token")
		if not isinstance(token, str) or not token:
			message = payload.get("error_description") or "Baidu OCR token response has no access_token"
			raise ProviderError(str(message), code=payload.get("error"))
		try:
			lifetime = float(payload.get("expires_in", 0))
		except (TypeError, ValueError) as exc:
			raise ProtocolError(f"Invalid expires_in in Baidu OCR token response: {payload.get('expires_in')!r}") from exc
		return token, lifetime

	def _post(self, url: str, **kwargs: Any) -> JsonDict:
		try:
			response = self.session.post(url, timeout=self.timeout, **kwargs)
		except requests.RequestException as exc:
			raise TransportError(f"Baidu OCR request to {url} failed: {exc}") from exc
		if not response.ok:
			raise TransportError(f"Baidu OCR error: status {response.status_code}, body {response.text}")
		try:
			payload = response.json()
		except ValueError as exc:
			raise ProtocolError(f"Baidu OCR returned non-JSON body: {response.text[:200]!r}") from exc
		if not isinstance(payload, dict):
			raise ProtocolError("Baidu OCR returned an unexpected JSON shape")
		return payload

	def _raise_for_error(self, payload: JsonDict) -> None:
		code = payload.get("error_code")
		if code is None:
			return
		if code in TOKEN_ERROR_CODES:
			self.token_cache.invalidate()
		raise ProviderError(str(payload.get("error_msg") or "Baidu OCR reported an error"), code=code)

	def _parse_fragments(self, payload: JsonDict) -> list[TextFragment]:
		words = payload.get("words_result")
		if words is None:
			raise ProtocolError("Baidu OCR response has no words_result")
		if not isinstance(words, list):
			raise ProtocolError("Baidu OCR words_result is not a list")
		fragments: list[TextFragment] = []
		for item in words:
			if not isinstance(item, dict):
				continue
			text = item.get("words")
			if not isinstance(text, str) or not text.strip():
				continue
			fragments.append(TextFragment(text=text.strip(), bounding_box=self._extract_box(item)))
		return fragments

	def _extract_box(self, item: JsonDict) -> BoundingBox:
		location = item.get("location")
		if not isinstance(location, dict):
			return BoundingBox()
		try:
			return BoundingBox(**{key: int(location.get(key) or 0) for key in ("left", "top", "width", "height")})
		except (TypeError, ValueError) as exc:
			raise ProtocolError(f"Malformed Baidu OCR location: {location}") from exc
