"""DashScope Qwen vision-language provider implementation."""


import logging
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import Any, Final

from dashscope import MultiModalConversation

from config import QwenVlmSettings
from errors import ProtocolError, ProviderError, TransportError
from schemas import StructuredVlmReply
from utils.image_io import encode_image_data_url
from utils.json_block import parse_vlm_reply

DEFAULT_TIMEOUT: Final[float] = 60.0

VLM_SYSTEM_PROMPT: Final[str] = (
	"你是一名结构化信息抽取助手，负责从气象监测照片中的水印或字幕里提取时间与地点。"
	"务必只输出严格符合要求的 JSON。"
)
VLM_USER_INSTRUCTION: Final[str] = """请阅读这张气象监测照片右上或右下角的文字水印，提取拍摄时间和测站地点。如果无法确定某个字段，请填空字符串并将 confidence 设置为 0。
返回 JSON，字段说明：
{
  "time": "24小时制时间戳，格式为 YYYY-MM-DD HH:MM[:SS]，若无法确定则为空字符串",
  "location": "地点中文名称，包含省市县或测站名称，无法确定则为空字符串",
  "confidence": 小数，0-1 之间，表示整体提取置信度,
  "notes": "可选，说明判断依据，若无可留空"
}
仅返回 JSON，不要添加其它文字。"""


def _field(node: Any, key: str) -> Any:
	# DashScope response objects are dict subclasses that also expose attributes.
	if isinstance(node, dict):
		return node.get(key)
	return getattr(node, key, None)


@dataclass
class QwenVlmClient:
	"""Client wrapper around a DashScope Qwen vision model."""

	settings: QwenVlmSettings
	timeout: float = DEFAULT_TIMEOUT

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	def extract_metadata(self, image_path: Path) -> StructuredVlmReply:
		"""Ask the model for the watermark time and location of one image."""
		messages = self._build_messages(image_path)
		response = self._call_service(messages)
		content = self._extract_content(response)
		return parse_vlm_reply(content)

	def _build_messages(self, image_path: Path) -> list[dict[str, Any]]:
		return [
			{"role": "system", "content": [{"text": VLM_SYSTEM_PROMPT}]},
			{
				"role": "user",
				"content": [
					{"text": VLM_USER_INSTRUCTION},
					{"image": encode_image_data_url(image_path)},
				],
			},
		]

	def _build_options(self) -> dict[str, Any]:
		if not self.settings.enable_thinking:
			return {}
		options: dict[str, Any] = {"enable_thinking": True}
		if self.settings.thinking_budget > 0:
			options["thinking_budget"] = self.settings.thinking_budget
		return options

	def _call_service(self, messages: list[dict[str, Any]]) -> Any:
		try:
			response = MultiModalConversation.call(
				model=self.settings.model,
				messages=messages,
				api_key=self.settings.api_key,
				base_address=self.settings.base_url,
				request_timeout=self.timeout,
				**self._build_options(),
			)
		except Exception as exc:  # noqa: BLE001
			raise TransportError(f"Failed to call Qwen VLM API: {exc}") from exc

		status_code = _field(response, "status_code")
		if status_code != HTTPStatus.OK:
			message = _field(response, "message") or "Qwen VLM request failed"
			raise ProviderError(f"Qwen VLM API error: status {status_code}, {message}", code=_field(response, "code"))
		return response

	def _extract_content(self, response: Any) -> str:
		choices = _field(_field(response, "output"), "choices")
		if not choices:
			raise ProtocolError("Qwen VLM API returned no choices")
		content = _field(_field(choices[0], "message"), "content")
		if isinstance(content, list):
			text = "".join(str(_field(part, "text") or "") for part in content)
		else:
			text = str(content or "")
		text = text.strip()
		if not text:
			raise ProtocolError("Qwen VLM API returned empty content")
		return text
