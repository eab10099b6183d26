import json
from typing import Annotated, Any, List

from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator

class Settings(BaseSettings):
	# Provider attempt order; names must match the backends built in providers.py
	provider_order: Annotated[List[str], NoDecode] = Field(
		default=["openai", "groq", "deepseek", "gemini", "openrouter"],
		validation_alias="PROVIDER_ORDER",
	)
	# Upper bound for a single provider call, in seconds
	provider_timeout_seconds: float = Field(default=60.0, validation_alias="PROVIDER_TIMEOUT_SECONDS")
	# Reject provider output that is not exactly `totalLessons` well-formed lessons
	strict_provider_output: bool = Field(default=True, validation_alias="STRICT_PROVIDER_OUTPUT")
	lesson_fallback_enabled: bool = Field(default=True, validation_alias="LESSON_FALLBACK_ENABLED")
	default_total_lessons: int = Field(default=20, validation_alias="DEFAULT_TOTAL_LESSONS")
	max_total_lessons: int = Field(default=100, validation_alias="MAX_TOTAL_LESSONS")

	# OpenAI
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
	openai_base_url: str = Field(default="https://api.openai.com/v1/chat/completions", validation_alias="OPENAI_BASE_URL")

	# Groq (OpenAI-compatible)
	groq_api_key: str | None = Field(default=None, validation_alias="GROQ_API_KEY")
	groq_model: str = Field(default="llama-3.3-70b-versatile", validation_alias="GROQ_MODEL")
	groq_base_url: str = Field(default="https://api.groq.com/openai/v1/chat/completions", validation_alias="GROQ_BASE_URL")

	# DeepSeek (OpenAI-compatible)
	deepseek_api_key: str | None = Field(default=None, validation_alias="DEEPSEEK_API_KEY")
	deepseek_model: str = Field(default="deepseek-chat", validation_alias="DEEPSEEK_MODEL")
	deepseek_base_url: str = Field(default="https://api.deepseek.com/chat/completions", validation_alias="DEEPSEEK_BASE_URL")

	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	# Tried in order until one answers
	gemini_models: Annotated[List[str], NoDecode] = Field(
		default=["gemini-1.5-flash-latest", "gemini-1.5-flash", "gemini-1.5-pro-latest"],
		validation_alias="GEMINI_MODELS",
	)
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")

	# OpenRouter configuration (optional, last resort before the template plan)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Syllabus Lesson Planner", validation_alias="OPENROUTER_TITLE")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	@field_validator("provider_order", "gemini_models", mode="before")
	@classmethod
	def _split_list(cls, value: Any) -> Any:
		# Accept "openai,gemini" as well as a JSON array
		if isinstance(value, str):
			text = value.strip()
			if text.startswith("["):
				return json.loads(text)
			return [part.strip() for part in text.split(",") if part.strip()]
		return value

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
