"""Error types raised by the watermark extraction pipeline."""


class ExtractionError(RuntimeError):
	"""Base class for every failure surfaced by the extraction entry point."""


class TransportError(ExtractionError):
	"""Network failure, timeout or non-success HTTP status."""


class ProtocolError(ExtractionError):
	"""Provider answered, but the payload could not be interpreted."""


class ProviderError(ExtractionError):
	"""Provider reported an explicit error code or message."""

	def __init__(self, message: str, code: str | int | None = None) -> None:
		super().__init__(message if code is None else f"{message} (code: {code})")
		self.code = code
