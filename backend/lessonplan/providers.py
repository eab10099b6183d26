from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .errors import ProviderError
from .settings import Settings

logger = logging.getLogger(__name__)


LESSON_FIELDS_HINT = (
	"Each object must have: dayNumber (integer starting at 1), topicTitle (string), "
	"fiveMinuteSummary (string), kidFriendlyExamples (array of strings) and "
	"quiz (object with questions: array of {question, options (4 strings), correctAnswer (one of the options)})."
)


@dataclass(frozen=True)
class Prompt:
	user: str
	system: Optional[str] = None


class Backend:
	"""One text-generation provider and its ordered model variants."""

	name: str = "backend"
	# Characters of syllabus text sent to this provider
	input_budget: int = 15000
	# Required API key prefix, if the provider has a recognisable one
	key_prefix: Optional[str] = None

	def __init__(
		self,
		api_key: Optional[str],
		models: Sequence[str],
		*,
		timeout: float = 60.0,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = (api_key or "").strip()
		self.models = [m for m in models if m]
		self.timeout = timeout
		self._transport = transport

	def is_available(self) -> bool:
		if not self.api_key or not self.models:
			return False
		if self.key_prefix and not self.api_key.startswith(self.key_prefix):
			return False
		return True

	def build_prompt(self, syllabus_text: str, lesson_count: int) -> Prompt:
		raise NotImplementedError

	async def invoke(self, prompt: Prompt, model: str) -> str:
		raise NotImplementedError

	def _client(self) -> httpx.AsyncClient:
		return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

	async def _post_json(self, model: str, url: str, *, headers: Dict[str, str], params: Optional[Dict[str, Any]] = None, payload: Dict[str, Any]) -> Dict[str, Any]:
		try:
			async with self._client() as client:
				r = await client.post(url, params=params, headers=headers, json=payload)
				r.raise_for_status()
				return r.json()
		except httpx.HTTPStatusError as http_err:
			body = http_err.response.text[:200]
			raise ProviderError(self.name, model, f"HTTP {http_err.response.status_code}: {body}") from http_err
		except httpx.RequestError as net_err:
			raise ProviderError(self.name, model, f"{type(net_err).__name__}: {net_err}") from net_err
		except ValueError as parse_err:
			raise ProviderError(self.name, model, "response body is not JSON") from parse_err


class ChatCompletionsBackend(Backend):
	"""Any provider speaking the OpenAI chat-completions protocol."""

	system_prompt = "You are an expert UK English Teacher. Output only a JSON array of lesson objects."
	json_mode = True

	def __init__(self, api_key: Optional[str], models: Sequence[str], *, base_url: str, extra_headers: Optional[Dict[str, str]] = None, **kwargs: Any) -> None:
		super().__init__(api_key, models, **kwargs)
		self.base_url = base_url
		self.extra_headers = {k: v for k, v in (extra_headers or {}).items() if v}

	def build_prompt(self, syllabus_text: str, lesson_count: int) -> Prompt:
		return Prompt(
			system=self.system_prompt,
			user=(
				f"Generate a JSON array of exactly {lesson_count} lesson objects, one per day, for this syllabus. "
				f"{LESSON_FIELDS_HINT}\nSyllabus: {syllabus_text[: self.input_budget]}"
			),
		)

	async def invoke(self, prompt: Prompt, model: str) -> str:
		messages = []
		if prompt.system:
			messages.append({"role": "system", "content": prompt.system})
		messages.append({"role": "user", "content": prompt.user})
		payload: Dict[str, Any] = {"model": model, "messages": messages}
		if self.json_mode:
			payload["response_format"] = {"type": "json_object"}
		headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
			**self.extra_headers,
		}
		data = await self._post_json(model, self.base_url, headers=headers, payload=payload)
		try:
			content = data["choices"][0]["message"]["content"]
		except (KeyError, IndexError, TypeError) as e:
			raise ProviderError(self.name, model, f"unexpected response shape: {str(data)[:200]}") from e
		if not isinstance(content, str):
			raise ProviderError(self.name, model, "non-text completion")
		if not content:
			raise ProviderError(self.name, model, "empty completion")
		return content


class OpenAIBackend(ChatCompletionsBackend):
	name = "OpenAI"
	input_budget = 30000
	key_prefix = "sk-"


class GroqBackend(ChatCompletionsBackend):
	name = "Groq"
	input_budget = 15000
	system_prompt = "You are an expert UK English Teacher. Output ONLY valid JSON."


class DeepSeekBackend(ChatCompletionsBackend):
	name = "DeepSeek"
	input_budget = 30000
	key_prefix = "sk-"
	system_prompt = "You are a helpful assistant that outputs only JSON."


class OpenRouterBackend(ChatCompletionsBackend):
	name = "OpenRouter"
	input_budget = 15000
	json_mode = False


class GeminiBackend(Backend):
	name = "Gemini"
	input_budget = 20000

	def __init__(self, api_key: Optional[str], models: Sequence[str], *, provider: str = "ai_studio", vertex_region: str = "us-central1", vertex_project: Optional[str] = None, **kwargs: Any) -> None:
		super().__init__(api_key, models, **kwargs)
		self.provider = provider
		self.vertex_region = vertex_region
		self.vertex_project = vertex_project

	def endpoint(self, model: str) -> str:
		if self.provider == "vertex":
			region = self.vertex_region
			project = self.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			return f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{model}:generateContent"
		# Google AI Studio (Generative Language API)
		return f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

	def build_prompt(self, syllabus_text: str, lesson_count: int) -> Prompt:
		return Prompt(
			user=(
				f"Output only a JSON array of exactly {lesson_count} lesson objects based on this syllabus. "
				f"{LESSON_FIELDS_HINT} Syllabus: {syllabus_text[: self.input_budget]}"
			),
		)

	async def invoke(self, prompt: Prompt, model: str) -> str:
		text = prompt.user if not prompt.system else f"{prompt.system}\n\n{prompt.user}"
		payload: Dict[str, Any] = {"contents": [{"parts": [{"text": text}]}]}
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self.provider == "vertex":
			headers["x-goog-api-key"] = self.api_key
		else:
			params["key"] = self.api_key
		data = await self._post_json(model, self.endpoint(model), headers=headers, params=params, payload=payload)
		try:
			text = data["candidates"][0]["content"]["parts"][0]["text"]
		except (KeyError, IndexError, TypeError) as e:
			raise ProviderError(self.name, model, f"unexpected response shape: {str(data)[:200]}") from e
		if not isinstance(text, str):
			raise ProviderError(self.name, model, "non-text completion")
		return text


def build_backends(cfg: Settings, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> List[Backend]:
	"""Instantiate the configured providers in `cfg.provider_order`."""
	common: Dict[str, Any] = {"timeout": cfg.provider_timeout_seconds, "transport": transport}
	registry = {
		"openai": lambda: OpenAIBackend(cfg.openai_api_key, [cfg.openai_model], base_url=cfg.openai_base_url, **common),
		"groq": lambda: GroqBackend(cfg.groq_api_key, [cfg.groq_model], base_url=cfg.groq_base_url, **common),
		"deepseek": lambda: DeepSeekBackend(cfg.deepseek_api_key, [cfg.deepseek_model], base_url=cfg.deepseek_base_url, **common),
		"gemini": lambda: GeminiBackend(
			cfg.gemini_api_key,
			cfg.gemini_models,
			provider=cfg.gemini_provider,
			vertex_region=cfg.vertex_region,
			vertex_project=cfg.vertex_project,
			**common,
		),
		"openrouter": lambda: OpenRouterBackend(
			cfg.openrouter_api_key,
			[cfg.openrouter_model],
			base_url=cfg.openrouter_base_url,
			extra_headers={"HTTP-Referer": cfg.openrouter_referer, "X-Title": cfg.openrouter_title},
			**common,
		),
	}
	backends: List[Backend] = []
	for key in cfg.provider_order:
		factory = registry.get(key.strip().lower())
		if factory is None:
			logger.warning("Ignoring unknown provider %r in PROVIDER_ORDER", key)
			continue
		backends.append(factory())
	return backends
