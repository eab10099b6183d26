from __future__ import annotations
import json
import re
from typing import Any, Iterator, List, Optional


_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def _unwrap(data: Any) -> Optional[List[Any]]:
	if isinstance(data, list):
		return data
	# {"lessons": [...]} and similar single-field wrappers
	if isinstance(data, dict) and len(data) == 1:
		value = next(iter(data.values()))
		if isinstance(value, list):
			return value
	return None


def _loads(text: str) -> tuple[bool, Any]:
	try:
		return True, json.loads(text)
	except ValueError:
		return False, None


def iter_array_literals(text: str) -> Iterator[str]:
	"""Yield each balanced top-level `[...]` substring of `text`, left to right.

	Brackets inside JSON string literals are ignored.
	"""
	depth = 0
	start = -1
	in_string = False
	escaped = False
	for pos, ch in enumerate(text):
		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue
		if ch == '"' and depth > 0:
			in_string = True
		elif ch == "[":
			if depth == 0:
				start = pos
			depth += 1
		elif ch == "]" and depth > 0:
			depth -= 1
			if depth == 0:
				yield text[start : pos + 1]


def extract_lesson_array(raw: Any) -> Optional[List[Any]]:
	"""Pull the lesson array out of a provider's raw reply.

	Returns None when nothing usable is found; an empty array is not usable.
	"""
	if not isinstance(raw, str) or not raw.strip():
		return None
	text = raw.strip()

	ok, data = _loads(text)
	if ok:
		return _unwrap(data) or None

	block = _CODE_BLOCK.search(text)
	if block:
		ok, data = _loads(block.group(1))
		if ok:
			found = _unwrap(data)
			if found:
				return found

	for candidate in iter_array_literals(text):
		ok, data = _loads(candidate)
		if ok and data:
			return data
	return None
