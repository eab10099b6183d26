from __future__ import annotations
import json
import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


def _new_id() -> str:
	return uuid.uuid4().hex


class ClassRecord(Base):
	__tablename__ = "classes"
	id = Column(String(32), primary_key=True, default=_new_id)
	name = Column(String(256), nullable=False)
	teacher_name = Column(String(256), nullable=True)
	student_name = Column(String(256), nullable=True)
	student_count = Column(Integer, default=1, nullable=False)
	total_lessons = Column(Integer, default=20, nullable=False)
	completed_lessons = Column(Integer, default=0, nullable=False)
	# Generated plan, stored exactly as the generator returned it
	lessons_json = Column(Text, nullable=True)
	last_generated = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	@property
	def lessons(self) -> Optional[List[Any]]:
		if not self.lessons_json:
			return None
		return json.loads(self.lessons_json)

	@lessons.setter
	def lessons(self, value: Optional[List[Any]]) -> None:
		self.lessons_json = json.dumps(value) if value is not None else None
