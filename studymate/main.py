from fastapi import FastAPI
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from studymate.api.dashboard import router as dashboard_router
from studymate.api.decks import router as decks_router
from studymate.api.doubts import router as doubts_router
from studymate.api.functions import router as functions_router
from studymate.api.pdfs import router as pdfs_router
from studymate.api.realtime import router as realtime_router
from studymate.api.sessions import router as sessions_router
from studymate.core.logging import setup_logging
from studymate.db.session import get_db

setup_logging()

app = FastAPI(title="StudyMate API", version="0.1.0")
app.include_router(sessions_router)
app.include_router(doubts_router)
app.include_router(decks_router)
app.include_router(pdfs_router)
app.include_router(dashboard_router)
app.include_router(functions_router)
app.include_router(realtime_router)


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
    db_ok: bool


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    db_ok = False
    db: Session | None = None
    try:
        db = next(get_db())
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        db_ok = False
    finally:
        if db is not None:
            db.close()

    return HealthResponse(ok=True, service="api", version=app.version, db_ok=db_ok)
