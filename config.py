"""Application configuration management for watermark extraction."""


import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

ENV_FILE: Final[str] = ".env"
DEFAULT_REGION: Final[str] = "cn-hangzhou"
DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_BACKEND: Final[str] = "qwen"
BACKENDS: Final[tuple[str, ...]] = ("qwen", "baidu", "aliyun")

DEFAULT_QWEN_BASE_URL: Final[str] = "https://dashscope.aliyuncs.com/api/v1"
DEFAULT_QWEN_MODEL: Final[str] = "qwen3-vl-plus"
DEFAULT_BAIDU_OCR_URL: Final[str] = "https://aip.baidubce.com/rest/2.0/ocr/v1/general"

# Watermarks sit in the top-right / bottom-right corners of the monitoring photos.
DEFAULT_BAND_DIVISOR: Final[int] = 3
DEFAULT_LOCATION_KEYWORDS: Final[tuple[str, ...]] = ("省", "市", "县", "区", "站", "路", "街", "镇", "乡", "村")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliyunCredentials:
	"""Container for Aliyun credential details."""
	access_key_id: str
	access_key_secret: str
	region_id: str = DEFAULT_REGION


@dataclass(frozen=True)
class BaiduCredentials:
	"""Container for Baidu OCR credential details."""
	api_key: str
	secret_key: str
	ocr_url: str = DEFAULT_BAIDU_OCR_URL


@dataclass(frozen=True)
class QwenVlmSettings:
	"""Container for DashScope credentials and Qwen VLM tuning."""
	api_key: str
	base_url: str = DEFAULT_QWEN_BASE_URL
	model: str = DEFAULT_QWEN_MODEL
	enable_thinking: bool = False
	thinking_budget: int = 0


@dataclass(frozen=True)
class LayoutSettings:
	"""Heuristics used to pick watermark fields out of OCR fragments."""
	band_divisor: int = DEFAULT_BAND_DIVISOR
	location_keywords: tuple[str, ...] = DEFAULT_LOCATION_KEYWORDS


@dataclass(frozen=True)
class AppConfig:
	"""Aggregate configuration for the extraction runtime."""
	backend: str = DEFAULT_BACKEND
	qwen_vlm: QwenVlmSettings | None = None
	baidu: BaiduCredentials | None = None
	aliyun: AliyunCredentials | None = None
	layout: LayoutSettings = field(default_factory=LayoutSettings)
	output_dir: Path = Path("outputs")
	log_level: int = DEFAULT_LOG_LEVEL


def load_config(env_file: str | Path = ENV_FILE) -> AppConfig:
	"""Load environment-based configuration values.

	Returns:
		AppConfig: Parsed configuration with credentials when available.

	Raises:
		ValueError: If ``EXTRACTION_BACKEND`` names an unknown backend.
	"""
	load_dotenv(env_file)
	backend = _get_env("EXTRACTION_BACKEND", DEFAULT_BACKEND).lower()
	if backend not in BACKENDS:
		raise ValueError(f"Unknown extraction backend {backend!r}; expected one of {', '.join(BACKENDS)}")

	return AppConfig(
		backend=backend,
		qwen_vlm=_load_qwen_settings(),
		baidu=_load_baidu_credentials(),
		aliyun=_load_aliyun_credentials(),
		layout=_load_layout_settings(),
		output_dir=Path(_get_env("OCR_OUTPUT_DIR", "outputs")).resolve(),
		log_level=_parse_log_level(os.getenv("LOG_LEVEL")),
	)


def configure_logging(level: int = DEFAULT_LOG_LEVEL) -> None:
	"""Configure the root logger for the application."""
	logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _get_env(key: str, fallback: str = "") -> str:
	value = (os.getenv(key) or "").strip()
	return value or fallback


def _get_env_int(key: str, fallback: int) -> int:
	value = _get_env(key)
	if not value:
		return fallback
	try:
		return int(value)
	except ValueError:
		_logger.warning("Invalid value for %s, using default %s", key, fallback)
		return fallback


def _parse_log_level(name: str | None) -> int:
	if not name:
		return DEFAULT_LOG_LEVEL
	level = logging.getLevelName(name.strip().upper())
	return level if isinstance(level, int) else DEFAULT_LOG_LEVEL


def _load_qwen_settings() -> QwenVlmSettings | None:
	"""Load Qwen VLM settings from the environment if a key is available."""
	api_key = _get_env("QWEN_VLM_API_KEY") or _get_env("DASHSCOPE_API_KEY")
	if not api_key:
		return None
	return QwenVlmSettings(
		api_key=api_key,
		base_url=_get_env("QWEN_VLM_BASE_URL", DEFAULT_QWEN_BASE_URL),
		model=_get_env("QWEN_VLM_MODEL", DEFAULT_QWEN_MODEL),
		enable_thinking=_get_env("QWEN_VLM_ENABLE_THINKING").lower() == "true",
		thinking_budget=_get_env_int("QWEN_VLM_THINKING_BUDGET", 0),
	)


def _load_baidu_credentials() -> BaiduCredentials | None:
	"""Load Baidu OCR credentials from the environment if available."""
	api_key = _get_env("BAIDU_OCR_API_KEY")
	secret_key = _get_env("BAIDU_OCR_SECRET_KEY")
	if api_key and secret_key:
		return BaiduCredentials(
			api_key=api_key,
			secret_key=secret_key,
			ocr_url=_get_env("BAIDU_OCR_URL", DEFAULT_BAIDU_OCR_URL),
		)
	return None


def _load_aliyun_credentials() -> AliyunCredentials | None:
	"""Load Aliyun credentials from the environment if available."""
	access_key_id = _get_env("ALIBABA_CLOUD_ACCESS_KEY_ID")
	access_key_secret = _get_env("ALIBABA_CLOUD_ACCESS_KEY_SECRET")
	region_id = _get_env("ALIBABA_CLOUD_REGION", DEFAULT_REGION)
	if access_key_id and access_key_secret:
		return AliyunCredentials(
			access_key_id=access_key_id,
			access_key_secret=access_key_secret,
			region_id=region_id,
		)
	return None


def _load_layout_settings() -> LayoutSettings:
	divisor = _get_env_int("WATERMARK_BAND_DIVISOR", DEFAULT_BAND_DIVISOR)
	if divisor <= 0:
		_logger.warning("WATERMARK_BAND_DIVISOR must be positive, using default %s", DEFAULT_BAND_DIVISOR)
		divisor = DEFAULT_BAND_DIVISOR
	raw_keywords = _get_env("WATERMARK_LOCATION_KEYWORDS")
	keywords = tuple(word for word in raw_keywords.replace("，", ",").split(",") if word.strip())
	return LayoutSettings(
		band_divisor=divisor,
		location_keywords=tuple(word.strip() for word in keywords) or DEFAULT_LOCATION_KEYWORDS,
	)
