from __future__ import annotations
from functools import lru_cache

from .orchestrator import LessonOrchestrator
from .providers import build_backends
from .settings import settings


@lru_cache(maxsize=1)
def get_orchestrator() -> LessonOrchestrator:
	# Backends are read-only after construction, so one instance serves every request
	return LessonOrchestrator(
		build_backends(settings),
		strict_output=settings.strict_provider_output,
		fallback_enabled=settings.lesson_fallback_enabled,
	)
