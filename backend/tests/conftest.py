from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Union

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lessonplan.db import Base, get_db
from lessonplan.deps import get_orchestrator
from lessonplan.errors import ProviderError
from lessonplan.main import app
from lessonplan.orchestrator import LessonOrchestrator
from lessonplan.providers import Backend, Prompt


class FakeBackend(Backend):
    """Scripted backend: each model maps to a reply string or an exception message."""

    def __init__(
        self,
        name: str,
        replies: Dict[str, Union[str, Exception]],
        *,
        api_key: Optional[str] = "test-key",
        key_prefix: Optional[str] = None,
        models: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(api_key, list(models or replies.keys()))
        self.name = name
        self.key_prefix = key_prefix
        self.replies = replies
        self.calls: List[str] = []
        self.prompts: List[Prompt] = []

    def build_prompt(self, syllabus_text: str, lesson_count: int) -> Prompt:
        return Prompt(user=f"{lesson_count}:{syllabus_text[:50]}")

    async def invoke(self, prompt: Prompt, model: str) -> str:
        self.calls.append(model)
        self.prompts.append(prompt)
        reply = self.replies[model]
        if isinstance(reply, Exception):
            raise ProviderError(self.name, model, str(reply))
        return reply


def make_lessons(count: int) -> List[dict]:
    return [
        {
            "dayNumber": day,
            "topicTitle": f"Topic {day}",
            "fiveMinuteSummary": "Summary",
            "kidFriendlyExamples": ["Example"],
            "quiz": {
                "questions": [
                    {
                        "question": "Pick one",
                        "options": ["A", "B", "C", "D"],
                        "correctAnswer": "A",
                    }
                ]
            },
        }
        for day in range(1, count + 1)
    ]


@pytest.fixture()
def db_session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def orchestrator() -> LessonOrchestrator:
    # No providers configured: every request goes to the template fallback
    return LessonOrchestrator([])


@pytest.fixture()
def client(db_session_factory: sessionmaker, orchestrator: LessonOrchestrator) -> Iterator[TestClient]:
    def _get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_orchestrator, None)
