from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..deps import get_orchestrator
from ..errors import ClientInputError
from ..orchestrator import GenerationResult, LessonOrchestrator
from ..settings import settings


router = APIRouter(tags=["lessons"])


class GenerateLessonsRequest(BaseModel):
	text: Optional[str] = None
	total_lessons: Optional[int] = Field(default=None, validation_alias="totalLessons")


def resolve_lesson_count(requested: Optional[int]) -> int:
	count = settings.default_total_lessons if requested is None else requested
	if count < 1 or count > settings.max_total_lessons:
		raise ClientInputError(
			"Invalid totalLessons",
			[f"totalLessons must be between 1 and {settings.max_total_lessons}"],
		)
	return count


def lessons_response(result: GenerationResult) -> JSONResponse:
	return JSONResponse(content=result.lessons, headers={"X-Lesson-Source": result.source})


@router.post("/generate-lessons")
async def generate_lessons(req: GenerateLessonsRequest, orchestrator: LessonOrchestrator = Depends(get_orchestrator)):
	text = (req.text or "").strip()
	if not text:
		raise ClientInputError("Missing text content")
	count = resolve_lesson_count(req.total_lessons)
	result = await orchestrator.generate(req.text, count)
	return lessons_response(result)
