import json

import pytest

from lessonplan.errors import ClientInputError, ProvidersExhausted
from lessonplan.orchestrator import FALLBACK_SOURCE, LessonOrchestrator

from conftest import FakeBackend, make_lessons


SYLLABUS = "Business Writing Basics\nGrammar and Tenses\nPhonics Practice\n"


@pytest.mark.asyncio
async def test_first_available_backend_wins():
    primary = FakeBackend("Primary", {"p-1": json.dumps(make_lessons(3))})
    secondary = FakeBackend("Secondary", {"s-1": json.dumps(make_lessons(3))})
    result = await LessonOrchestrator([primary, secondary]).generate(SYLLABUS, 3)

    assert result.source == "Primary"
    assert result.lessons == make_lessons(3)
    assert result.failures == []
    assert primary.calls == ["p-1"]
    assert secondary.calls == []


@pytest.mark.asyncio
async def test_unavailable_backend_is_skipped_without_failure():
    missing = FakeBackend("Missing", {"m-1": "[]"}, api_key=None)
    wrong_prefix = FakeBackend("Prefixed", {"x-1": "[]"}, api_key="abc", key_prefix="sk-")
    working = FakeBackend("Working", {"w-1": json.dumps(make_lessons(2))})
    result = await LessonOrchestrator([missing, wrong_prefix, working]).generate(SYLLABUS, 2)

    assert result.source == "Working"
    assert result.failures == []
    assert missing.calls == [] and wrong_prefix.calls == []


@pytest.mark.asyncio
async def test_variants_tried_in_order_before_next_backend():
    multi = FakeBackend(
        "Multi",
        {"v1": RuntimeError("404 model not found"), "v2": "no json here", "v3": json.dumps({"lessons": make_lessons(2)})},
    )
    later = FakeBackend("Later", {"l-1": json.dumps(make_lessons(2))})
    result = await LessonOrchestrator([multi, later]).generate(SYLLABUS, 2)

    assert multi.calls == ["v1", "v2", "v3"]
    assert later.calls == []
    assert result.source == "Multi"
    assert result.lessons == make_lessons(2)
    assert result.details == [
        "Multi (v1): 404 model not found",
        "Multi (v2): no lesson array found in response",
    ]


@pytest.mark.asyncio
async def test_all_failures_fall_back_to_template_plan():
    a = FakeBackend("A", {"a-1": RuntimeError("boom")})
    b = FakeBackend("B", {"b-1": "sorry", "b-2": RuntimeError("quota")})
    result = await LessonOrchestrator([a, b]).generate(SYLLABUS, 3)

    assert result.source == FALLBACK_SOURCE
    assert [l["dayNumber"] for l in result.lessons] == [1, 2, 3]
    assert result.details == [
        "A (a-1): boom",
        "B (b-1): no lesson array found in response",
        "B (b-2): quota",
    ]


@pytest.mark.asyncio
async def test_no_backends_uses_fallback_for_any_count():
    orchestrator = LessonOrchestrator([])
    for count in (1, 4, 25):
        result = await orchestrator.generate(SYLLABUS, count)
        assert result.source == FALLBACK_SOURCE
        assert [l["dayNumber"] for l in result.lessons] == list(range(1, count + 1))


@pytest.mark.asyncio
async def test_strict_mode_rejects_short_plan():
    short = FakeBackend("Short", {"s": json.dumps(make_lessons(2))})
    result = await LessonOrchestrator([short]).generate(SYLLABUS, 3)

    assert result.source == FALLBACK_SOURCE
    assert result.details == ["Short (s): expected 3 lessons, got 2"]


@pytest.mark.asyncio
async def test_strict_mode_rejects_bad_quiz():
    lessons = make_lessons(1)
    lessons[0]["quiz"]["questions"][0]["correctAnswer"] = "Z"
    bad = FakeBackend("Bad", {"b": json.dumps(lessons)})
    result = await LessonOrchestrator([bad]).generate(SYLLABUS, 1)

    assert result.source == FALLBACK_SOURCE
    assert result.details[0].startswith("Bad (b): lesson schema mismatch")


@pytest.mark.asyncio
async def test_lenient_mode_accepts_any_non_empty_array_verbatim():
    odd = FakeBackend("Odd", {"o": '[{"title": "whatever"}]'})
    result = await LessonOrchestrator([odd], strict_output=False).generate(SYLLABUS, 5)

    assert result.source == "Odd"
    assert result.lessons == [{"title": "whatever"}]


@pytest.mark.asyncio
async def test_exhaustion_without_fallback_raises_with_details():
    a = FakeBackend("A", {"a-1": RuntimeError("timeout")})
    with pytest.raises(ProvidersExhausted) as exc_info:
        await LessonOrchestrator([a], fallback_enabled=False).generate(SYLLABUS, 2)
    assert exc_info.value.details == ["A (a-1): timeout"]


@pytest.mark.asyncio
async def test_blank_text_is_rejected_before_any_backend():
    a = FakeBackend("A", {"a-1": json.dumps(make_lessons(1))})
    orchestrator = LessonOrchestrator([a])
    for text in (None, "", "   \n"):
        with pytest.raises(ClientInputError):
            await orchestrator.generate(text, 1)
    assert a.calls == []


@pytest.mark.asyncio
async def test_prompt_built_once_per_backend():
    multi = FakeBackend("Multi", {"v1": RuntimeError("x"), "v2": json.dumps(make_lessons(1))})
    await LessonOrchestrator([multi]).generate(SYLLABUS, 1)
    assert multi.prompts[0] is multi.prompts[1]
    assert multi.prompts[0].user.startswith("1:")


@pytest.mark.asyncio
async def test_strict_mode_rejects_string_day_numbers():
    lessons = make_lessons(2)
    for lesson in lessons:
        lesson["dayNumber"] = str(lesson["dayNumber"])
    stringly = FakeBackend("Stringly", {"s": json.dumps(lessons)})
    result = await LessonOrchestrator([stringly]).generate(SYLLABUS, 2)

    assert result.source == FALLBACK_SOURCE
    assert [l["dayNumber"] for l in result.lessons] == [1, 2]
    assert result.details[0].startswith("Stringly (s): lesson schema mismatch")


@pytest.mark.asyncio
async def test_strict_mode_rejects_float_day_numbers():
    lessons = make_lessons(1)
    lessons[0]["dayNumber"] = 1.0
    floaty = FakeBackend("Floaty", {"f": json.dumps(lessons)})
    result = await LessonOrchestrator([floaty]).generate(SYLLABUS, 1)

    assert result.source == FALLBACK_SOURCE
