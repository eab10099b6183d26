from __future__ import annotations
from typing import List, Optional, Sequence

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
	error: str
	details: List[str] = []


class ClientInputError(ValueError):
	"""The request itself is unusable; nothing was sent to a provider."""
	def __init__(self, message: str, details: Optional[Sequence[str]] = None):
		super().__init__(message)
		self.message = message
		self.details = list(details or [])


class ProviderError(RuntimeError):
	"""One provider/model attempt failed. Collected by the orchestrator, never surfaced raw."""
	def __init__(self, provider: str, variant: str, message: str):
		super().__init__(f"{provider} ({variant}): {message}")
		self.provider = provider
		self.variant = variant
		self.message = message


class ProvidersExhausted(RuntimeError):
	"""Every available provider failed and the template fallback is switched off."""
	def __init__(self, details: Sequence[str]):
		super().__init__("All lesson providers failed")
		self.details = list(details)


class ClassNotFound(LookupError):
	def __init__(self, class_id: str):
		super().__init__(f"class {class_id} not found")
		self.class_id = class_id


class LessonNotFound(LookupError):
	def __init__(self, class_id: str, day_number: int):
		super().__init__(f"class {class_id} has no lesson for day {day_number}")
		self.class_id = class_id
		self.day_number = day_number


def _error_json(status_code: int, error: str, details: Sequence[str] = ()) -> JSONResponse:
	body = ErrorResponse(error=error, details=list(details))
	return JSONResponse(status_code=status_code, content=body.model_dump())


async def client_input_error_handler(request: Request, exc: ClientInputError) -> JSONResponse:
	return _error_json(400, exc.message, exc.details)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
	details = []
	for err in exc.errors():
		loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
		msg = err.get("msg", "invalid value")
		details.append(f"{loc}: {msg}" if loc else msg)
	return _error_json(400, "Invalid request body", details)


async def providers_exhausted_handler(request: Request, exc: ProvidersExhausted) -> JSONResponse:
	return _error_json(502, str(exc), exc.details)


async def not_found_handler(request: Request, exc: LookupError) -> JSONResponse:
	return _error_json(404, str(exc))


def register_exception_handlers(app) -> None:
	app.add_exception_handler(ClientInputError, client_input_error_handler)
	app.add_exception_handler(RequestValidationError, request_validation_error_handler)
	app.add_exception_handler(ProvidersExhausted, providers_exhausted_handler)
	app.add_exception_handler(ClassNotFound, not_found_handler)
	app.add_exception_handler(LessonNotFound, not_found_handler)
