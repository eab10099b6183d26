import logging

from fastapi import FastAPI, Depends

from .db import Base, engine
from .deps import get_orchestrator
from .errors import register_exception_handlers
from .orchestrator import LessonOrchestrator
from .settings import settings
from .routers import classes, lessons

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Syllabus Lesson Planner API")
register_exception_handlers(app)
app.include_router(lessons.router)
app.include_router(classes.router)


@app.get("/info")
def root(orchestrator: LessonOrchestrator = Depends(get_orchestrator)):
	return {
		"status": "ok",
		"providers": [b.name for b in orchestrator.available_backends()],
		"fallback_enabled": orchestrator.fallback_enabled,
	}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
