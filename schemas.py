"""Pydantic schemas for watermark extraction inputs and outputs."""


from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field, field_validator

Backend = Literal["qwen", "baidu", "aliyun"]


class BoundingBox(BaseModel):
	"""Pixel-space box of a detected text region."""
	left: int = 0
	top: int = 0
	width: int = 0
	height: int = 0


class TextFragment(BaseModel):
	"""Represents a single OCR text region from any provider."""
	text: str
	bounding_box: BoundingBox = Field(default_factory=BoundingBox)


class SpatialBands(BaseModel):
	"""Top and bottom partitions of the fragments of one image."""
	top: list[TextFragment] = Field(default_factory=list)
	bottom: list[TextFragment] = Field(default_factory=list)


class StructuredVlmReply(BaseModel):
	"""Structured answer decoded from a vision model completion."""
	time: str = ""
	location: str = ""
	confidence: float = Field(default=0.0, ge=0.0, le=1.0)
	notes: str = ""

	@field_validator("time", "location", "notes", mode="before")
	@classmethod
	def _null_as_empty(cls, value: Any) -> Any:
		return "" if value is None else value

	@field_validator("confidence", mode="before")
	@classmethod
	def _clamp_confidence(cls, value: Any) -> Any:
		if value is None:
			return 0.0
		if isinstance(value, str):
			try:
				value = float(value)
			except ValueError:
				return value
		if isinstance(value, (int, float)) and not isinstance(value, bool):
			return min(max(float(value), 0.0), 1.0)
		return value


class ExtractionResult(BaseModel):
	"""Normalized capture time and location for one image."""
	time: str = ""
	location: str = ""
	backend: Backend | None = None
	confidence: float | None = None
	skipped: bool = False

	@computed_field  # type: ignore[prop-decorator]
	@property
	def is_standard(self) -> bool:
		return self.time != "" and self.location != ""

	@classmethod
	def disabled(cls, backend: Backend | None = None) -> "ExtractionResult":
		"""Neutral result returned when the backend is not configured."""
		return cls(backend=backend, skipped=True)


class Station(BaseModel):
	"""Weather monitoring station with WGS84 coordinates."""
	id: str
	name: str
	longitude: float
	latitude: float
