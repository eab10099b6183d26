"""Template lesson plan built straight from the syllabus text.

Used when no text-generation provider produced a usable plan. Everything here
is deterministic: the same text and lesson count always give the same plan.
"""

from __future__ import annotations
from typing import Dict, List, Tuple

from .schemas import LessonModule, Quiz, QuizQuestion


PLACEHOLDER_LINE = "English Language Proficiency"

WORKSHOPS: Dict[str, List[str]] = {
	"grammar": ["Tense Review", "Sentence Structure", "Punctuation Mastery", "Grammatical Accuracy"],
	"vocabulary": ["Expanding Lexicon", "Idiomatic Expressions", "Contextual Meaning", "Word Choice"],
	"business": ["Formal Communication", "Professional Email Writing", "Presentation Skills", "Meeting Etiquette"],
	"phonics": ["Vowel Sounds", "Consonant Blends", "Pronunciation Workshop", "Intonation & Rhythm"],
}

# First match wins; anything unmatched is grammar
CATEGORY_RULES: List[Tuple[str, Tuple[str, ...]]] = [
	("business", ("business", "work")),
	("phonics", ("sound", "speak", "phonic")),
	("vocabulary", ("word", "vocab")),
]
DEFAULT_CATEGORY = "grammar"

DISTRACTORS = ["General Overview", "Casual Conversation", "Theoretical History"]

_TITLE_LIMIT = 50
_TITLE_CUT = 47


def syllabus_lines(text: str) -> List[str]:
	lines = []
	for raw in text.split("\n"):
		line = raw.strip()
		if len(line) > 10:
			lines.append(line)
	return lines


def detect_category(line: str) -> str:
	lowered = line.lower()
	for category, keywords in CATEGORY_RULES:
		if any(k in lowered for k in keywords):
			return category
	return DEFAULT_CATEGORY


def source_index(day: int, total: int, num_lines: int) -> int:
	# Spread the days proportionally over the syllabus lines
	idx = int(((day - 1) / total) * num_lines)
	return max(0, min(idx, num_lines - 1))


def topic_title(line: str) -> str:
	if len(line) > _TITLE_LIMIT:
		return line[:_TITLE_CUT] + "..."
	return line


def _build_lesson(day: int, line: str) -> LessonModule:
	workshops = WORKSHOPS[detect_category(line)]
	workshop = workshops[(day - 1) % len(workshops)]
	return LessonModule(
		day_number=day,
		topic_title=topic_title(line),
		five_minute_summary=(
			f"A comprehensive session focusing on {line}. This module bridges the gap between "
			f"theoretical knowledge and practical application using the {workshop} framework."
		),
		kid_friendly_examples=[
			f"{workshop}: Hands-on workshop focusing on practical usage.",
			"Interactive peer-review and feedback sessions.",
			"Real-world application exercises based on syllabus requirements.",
		],
		quiz=Quiz(questions=[
			QuizQuestion(
				question=f"Which core aspect of {line[:20]} was emphasized today?",
				options=[workshop, *DISTRACTORS],
				correct_answer=workshop,
			)
		]),
	)


def generate_fallback_lessons(text: str, lesson_count: int) -> List[LessonModule]:
	lines = syllabus_lines(text or "")
	lessons: List[LessonModule] = []
	for day in range(1, lesson_count + 1):
		if lines:
			line = lines[source_index(day, lesson_count, len(lines))]
		else:
			line = PLACEHOLDER_LINE
		lessons.append(_build_lesson(day, line))
	return lessons
