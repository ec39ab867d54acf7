"""Access token cache for OCR services with short-lived bearer tokens."""


import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Final

DEFAULT_REFRESH_MARGIN: Final[float] = 300.0

TokenFetcher = Callable[[], tuple[str, float]]


@dataclass(frozen=True)
class AccessToken:
	"""Token value with its absolute expiry on the cache clock."""
	value: str
	expires_at: float


class AccessTokenCache:
	"""Hands out a valid token, refreshing it shortly before it expires.

	``fetch`` returns the token and its lifetime in seconds. Fetch errors
	propagate unchanged; the cache never retries. Refreshes are serialized by
	an internal lock so one cache can be shared between threads.
	"""

	def __init__(
		self,
		fetch: TokenFetcher,
		refresh_margin: float = DEFAULT_REFRESH_MARGIN,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self._fetch = fetch
		self._refresh_margin = refresh_margin
		self._clock = clock
		self._token: AccessToken | None = None
		self._lock = threading.Lock()
		self._logger = logging.getLogger(self.__class__.__name__)

	def get_valid_token(self) -> str:
		with self._lock:
			now = self._clock()
			if self._token is None or now >= self._token.expires_at - self._refresh_margin:
				value, lifetime = self._fetch()
				self._token = AccessToken(value=value, expires_at=now + lifetime)
				self._logger.debug("Fetched access token valid for %.0f seconds", lifetime)
			return self._token.value

	def invalidate(self) -> None:
		"""Forget the cached token so the next call fetches a new one."""
		with self._lock:
			self._token = None
