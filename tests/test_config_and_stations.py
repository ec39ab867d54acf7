"""Tests for environment configuration and the station lookup."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from config import DEFAULT_LOCATION_KEYWORDS, DEFAULT_QWEN_MODEL, load_config
from schemas import Station
from stations import find_nearest_station, haversine_distance, load_stations

ENV_KEYS = (
	"EXTRACTION_BACKEND",
	"QWEN_VLM_API_KEY",
	"DASHSCOPE_API_KEY",
	"QWEN_VLM_BASE_URL",
	"QWEN_VLM_MODEL",
	"QWEN_VLM_ENABLE_THINKING",
	"QWEN_VLM_THINKING_BUDGET",
	"BAIDU_OCR_API_KEY",
	"BAIDU_OCR_SECRET_KEY",
	"BAIDU_OCR_URL",
	"ALIBABA_CLOUD_ACCESS_KEY_ID",
	"ALIBABA_CLOUD_ACCESS_KEY_SECRET",
	"ALIBABA_CLOUD_REGION",
	"WATERMARK_BAND_DIVISOR",
	"WATERMARK_LOCATION_KEYWORDS",
	"OCR_OUTPUT_DIR",
	"LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
	# setenv first so keys written later by load_dotenv are removed on teardown.
	for key in ENV_KEYS:
		monkeypatch.setenv(key, "")
		monkeypatch.delenv(key)
	return tmp_path / "absent.env"


def test_defaults_without_credentials(clean_env: Path) -> None:
	config = load_config(clean_env)
	assert config.backend == "qwen"
	assert config.qwen_vlm is None
	assert config.baidu is None
	assert config.aliyun is None
	assert config.layout.band_divisor == 3
	assert config.layout.location_keywords == DEFAULT_LOCATION_KEYWORDS


def test_qwen_settings(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("QWEN_VLM_API_KEY", " sk-123 ")
	monkeypatch.setenv("QWEN_VLM_ENABLE_THINKING", "TRUE")
	monkeypatch.setenv("QWEN_VLM_THINKING_BUDGET", "1024")
	settings = load_config(clean_env).qwen_vlm
	assert settings is not None
	assert settings.api_key == "sk-123"
	assert settings.model == DEFAULT_QWEN_MODEL
	assert settings.enable_thinking is True
	assert settings.thinking_budget == 1024


def test_invalid_thinking_budget_falls_back(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("DASHSCOPE_API_KEY", "sk")
	monkeypatch.setenv("QWEN_VLM_THINKING_BUDGET", "lots")
	settings = load_config(clean_env).qwen_vlm
	assert settings is not None
	assert settings.thinking_budget == 0
	assert settings.enable_thinking is False


def test_baidu_requires_both_keys(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("EXTRACTION_BACKEND", "Baidu")
	monkeypatch.setenv("BAIDU_OCR_API_KEY", "ak")
	config = load_config(clean_env)
	assert config.backend == "baidu"
	assert config.baidu is None
	monkeypatch.setenv("BAIDU_OCR_SECRET_KEY", "sk")
	assert load_config(clean_env).baidu is not None


def test_unknown_backend_rejected(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("EXTRACTION_BACKEND", "tesseract")
	with pytest.raises(ValueError):
		load_config(clean_env)


def test_layout_overrides(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("WATERMARK_BAND_DIVISOR", "4")
	monkeypatch.setenv("WATERMARK_LOCATION_KEYWORDS", "站, 台，Station")
	layout = load_config(clean_env).layout
	assert layout.band_divisor == 4
	assert layout.location_keywords == ("站", "台", "Station")


def test_env_file_is_loaded(clean_env: Path, tmp_path: Path) -> None:
	env_file = tmp_path / "custom.env"
	env_file.write_text("BAIDU_OCR_API_KEY=file-ak\nBAIDU_OCR_SECRET_KEY=file-sk\n", encoding="utf-8")
	config = load_config(env_file)
	assert config.baidu is not None
	assert config.baidu.api_key == "file-ak"


def test_haversine_beijing_to_shanghai() -> None:
	assert haversine_distance(116.4074, 39.9042, 121.4737, 31.2304) == pytest.approx(1067.0, abs=50.0)
	assert haversine_distance(116.4074, 39.9042, 116.4074, 39.9042) == pytest.approx(0.0, abs=0.1)


def test_find_nearest_station(tmp_path: Path) -> None:
	path = tmp_path / "stations.json"
	path.write_text(
		json.dumps(
			[
				{"id": "54511", "name": "北京", "longitude": 116.47, "latitude": 39.81},
				{"id": "58362", "name": "上海", "longitude": 121.45, "latitude": 31.40},
			],
			ensure_ascii=False,
		),
		encoding="utf-8",
	)
	stations = load_stations(path)
	nearest = find_nearest_station(stations, 121.47, 31.23)
	assert isinstance(nearest, Station)
	assert nearest.id == "58362"
	assert find_nearest_station([], 0.0, 0.0) is None


@pytest.mark.parametrize(
	"content",
	[
		"not json",
		'{"id": "54511"}',
		'[{"id": "54511", "name": "北京", "longitude": "east", "latitude": 39.81}]',
	],
)
def test_load_stations_rejects_malformed_file(tmp_path: Path, content: str) -> None:
	path = tmp_path / "stations.json"
	path.write_text(content, encoding="utf-8")
	with pytest.raises(ValidationError):
		load_stations(path)
