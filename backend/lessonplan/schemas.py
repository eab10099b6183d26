from __future__ import annotations
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
	# Wire format is camelCase (dayNumber, topicTitle, ...)
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizQuestion(_CamelModel):
	question: StrictStr
	options: List[StrictStr] = Field(min_length=4, max_length=4)
	correct_answer: StrictStr

	@model_validator(mode="after")
	def _answer_is_an_option(self) -> "QuizQuestion":
		if self.correct_answer not in self.options:
			raise ValueError("correctAnswer must be one of the options")
		return self


class Quiz(_CamelModel):
	questions: List[QuizQuestion]


class LessonModule(_CamelModel):
	# No coercion: "1" or 1.0 is not a day number
	day_number: StrictInt = Field(ge=1)
	topic_title: StrictStr
	five_minute_summary: StrictStr
	kid_friendly_examples: List[StrictStr]
	quiz: Quiz


_lesson_list = TypeAdapter(List[LessonModule])


def check_lesson_plan(payload: List[Any], lesson_count: int) -> Optional[str]:
	"""Return None when `payload` is a complete plan, else a short reason.

	A complete plan has exactly `lesson_count` lessons numbered 1..N in order.
	"""
	if len(payload) != lesson_count:
		return f"expected {lesson_count} lessons, got {len(payload)}"
	try:
		lessons = _lesson_list.validate_python(payload)
	except ValidationError as e:
		return f"lesson schema mismatch ({e.error_count()} errors)"
	days = [lesson.day_number for lesson in lessons]
	if days != list(range(1, lesson_count + 1)):
		return "dayNumber values are not 1..N in order"
	return None


def dump_lessons(lessons: List[LessonModule]) -> List[dict]:
	return [lesson.model_dump(by_alias=True) for lesson in lessons]
