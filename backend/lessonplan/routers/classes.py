from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_orchestrator
from ..errors import ClassNotFound, ClientInputError, LessonNotFound
from ..models import ClassRecord
from ..orchestrator import LessonOrchestrator
from .lessons import resolve_lesson_count


router = APIRouter(prefix="/classes", tags=["classes"])


class CreateClassRequest(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	name: str
	teacher_name: Optional[str] = None
	student_name: Optional[str] = None
	total_lessons: Optional[int] = None


class GenerateForClassRequest(BaseModel):
	text: Optional[str] = None


class ClassOut(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

	id: str
	name: str
	teacher_name: Optional[str] = None
	student_name: Optional[str] = None
	student_count: int
	total_lessons: int
	completed_lessons: int
	lessons: Optional[List[Any]] = None
	last_generated: Optional[datetime] = None
	created_at: datetime


def _out(row: ClassRecord) -> dict:
	return ClassOut.model_validate(row).model_dump(by_alias=True, mode="json")


def _get_class(db: Session, class_id: str) -> ClassRecord:
	row = db.get(ClassRecord, class_id)
	if row is None:
		raise ClassNotFound(class_id)
	return row


@router.post("", status_code=201)
def create_class(req: CreateClassRequest, db: Session = Depends(get_db)):
	name = req.name.strip()
	if not name:
		raise ClientInputError("Missing class name")
	row = ClassRecord(
		name=name,
		teacher_name=req.teacher_name,
		student_name=req.student_name,
		student_count=1,
		total_lessons=resolve_lesson_count(req.total_lessons),
		completed_lessons=0,
	)
	db.add(row)
	db.commit()
	db.refresh(row)
	return _out(row)


@router.get("")
def list_classes(db: Session = Depends(get_db)):
	rows = db.query(ClassRecord).order_by(ClassRecord.created_at.desc()).all()
	return [_out(r) for r in rows]


@router.get("/{class_id}")
def get_class(class_id: str, db: Session = Depends(get_db)):
	return _out(_get_class(db, class_id))


@router.delete("/{class_id}", status_code=204)
def delete_class(class_id: str, db: Session = Depends(get_db)):
	row = _get_class(db, class_id)
	db.delete(row)
	db.commit()


@router.post("/{class_id}/clone", status_code=201)
def clone_class(class_id: str, db: Session = Depends(get_db)):
	src = _get_class(db, class_id)
	lessons = src.lessons
	clone = ClassRecord(
		name=f"{src.name} (Clone)",
		teacher_name=src.teacher_name,
		student_name=src.student_name,
		student_count=src.student_count,
		total_lessons=src.total_lessons,
		completed_lessons=0,
	)
	if lessons is not None:
		clone.lessons = [{**l, "completed": False} if isinstance(l, dict) else l for l in lessons]
	clone.last_generated = src.last_generated
	db.add(clone)
	db.commit()
	db.refresh(clone)
	return _out(clone)


@router.post("/{class_id}/generate")
async def generate_for_class(
	class_id: str,
	req: GenerateForClassRequest,
	db: Session = Depends(get_db),
	orchestrator: LessonOrchestrator = Depends(get_orchestrator),
):
	row = _get_class(db, class_id)
	if not (req.text or "").strip():
		raise ClientInputError("Missing text content")
	result = await orchestrator.generate(req.text, row.total_lessons)
	row.lessons = result.lessons
	row.completed_lessons = 0
	row.last_generated = datetime.utcnow()
	db.add(row)
	db.commit()
	db.refresh(row)
	out = _out(row)
	out["source"] = result.source
	return out


@router.post("/{class_id}/lessons/{day_number}/toggle")
def toggle_lesson(class_id: str, day_number: int, db: Session = Depends(get_db)):
	row = _get_class(db, class_id)
	lessons = row.lessons or []
	found = False
	updated = []
	for lesson in lessons:
		if isinstance(lesson, dict) and lesson.get("dayNumber") == day_number:
			lesson = {**lesson, "completed": not lesson.get("completed", False)}
			found = True
		updated.append(lesson)
	if not found:
		raise LessonNotFound(class_id, day_number)
	row.lessons = updated
	row.completed_lessons = sum(1 for l in updated if isinstance(l, dict) and l.get("completed"))
	db.add(row)
	db.commit()
	db.refresh(row)
	return _out(row)
