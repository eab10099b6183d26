from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .errors import ClientInputError, ProviderError, ProvidersExhausted
from .fallback import generate_fallback_lessons
from .normalizer import extract_lesson_array
from .providers import Backend
from .schemas import check_lesson_plan, dump_lessons

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"


@dataclass(frozen=True)
class AttemptFailure:
	provider: str
	variant: str
	reason: str

	def describe(self) -> str:
		return f"{self.provider} ({self.variant}): {self.reason}"


@dataclass
class GenerationResult:
	lessons: List[Any]
	source: str
	failures: List[AttemptFailure] = field(default_factory=list)

	@property
	def details(self) -> List[str]:
		return [f.describe() for f in self.failures]


class LessonOrchestrator:
	"""Walks the provider chain in priority order and stops at the first usable plan.

	Providers whose credentials are missing are skipped without being counted.
	Every failed attempt is recorded; when the chain is exhausted the template
	plan from `fallback.py` is returned, or `ProvidersExhausted` is raised if the
	fallback has been switched off.
	"""

	def __init__(self, backends: Sequence[Backend], *, strict_output: bool = True, fallback_enabled: bool = True) -> None:
		self.backends = list(backends)
		self.strict_output = strict_output
		self.fallback_enabled = fallback_enabled

	def available_backends(self) -> List[Backend]:
		return [b for b in self.backends if b.is_available()]

	def _usable(self, raw: str, lesson_count: int) -> tuple[Optional[List[Any]], Optional[str]]:
		payload = extract_lesson_array(raw)
		if payload is None:
			return None, "no lesson array found in response"
		if self.strict_output:
			problem = check_lesson_plan(payload, lesson_count)
			if problem:
				return None, problem
		return payload, None

	async def generate(self, syllabus_text: Optional[str], lesson_count: int) -> GenerationResult:
		if not syllabus_text or not syllabus_text.strip():
			raise ClientInputError("Missing text content")
		if lesson_count < 1:
			raise ClientInputError("totalLessons must be at least 1")

		logger.info("Generating %d lessons. Text length: %d", lesson_count, len(syllabus_text))
		failures: List[AttemptFailure] = []
		for backend in self.available_backends():
			prompt = backend.build_prompt(syllabus_text, lesson_count)
			for model in backend.models:
				logger.info("Trying %s (%s)", backend.name, model)
				try:
					raw = await backend.invoke(prompt, model)
				except ProviderError as e:
					logger.warning("%s (%s) failed: %s", backend.name, model, e.message)
					failures.append(AttemptFailure(backend.name, model, e.message))
					continue
				payload, problem = self._usable(raw, lesson_count)
				if payload is None:
					logger.warning("%s (%s) returned an unusable plan: %s", backend.name, model, problem)
					failures.append(AttemptFailure(backend.name, model, problem or "unusable response"))
					continue
				logger.info("Lesson plan produced by %s (%s)", backend.name, model)
				return GenerationResult(lessons=payload, source=backend.name, failures=failures)

		details = [f.describe() for f in failures]
		if not self.fallback_enabled:
			logger.error("All lesson providers failed: %s", details)
			raise ProvidersExhausted(details)
		logger.warning("No provider produced a plan (%d failed attempts); using template fallback", len(failures))
		lessons: List[Dict[str, Any]] = dump_lessons(generate_fallback_lessons(syllabus_text, lesson_count))
		return GenerationResult(lessons=lessons, source=FALLBACK_SOURCE, failures=failures)
