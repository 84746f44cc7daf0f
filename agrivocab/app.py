"""FastAPI application: JSON session controller around the progress engine."""
from __future__ import annotations

import itertools
import logging
import os

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request

from agrivocab.catalog import load_catalog
from agrivocab.config import Settings, load_settings, save_settings
from agrivocab.db import Database
from agrivocab.errors import (
    CatalogUnavailable,
    EmptyBatchError,
    IncompleteReviewError,
    InvalidConfiguration,
)
from agrivocab.models import StudyContext, WordRecord
from agrivocab.srs import (
    complete_learning,
    complete_review,
    grade_answer,
    progress_stats,
    recent_history,
    select_learning_batch,
    select_review_batch,
)

app = FastAPI(title="AgriVocab")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None
_context: StudyContext | None = None
_active_sessions: dict[int, dict] = {}  # session_id -> session state
_session_ids = itertools.count(1)

log = logging.getLogger("agrivocab.app")


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def get_context() -> StudyContext:
    assert _context is not None
    return _context


def _require_catalog() -> StudyContext:
    ctx = get_context()
    if not ctx.catalog:
        raise HTTPException(409, "No word list loaded. Check the sheet URL in settings.")
    return ctx


def _import_catalog(db: Database, settings: Settings) -> list[WordRecord]:
    records = load_catalog(settings)
    db.import_catalog(records, source=settings.sheets_url)
    return records


def _auto_import_if_empty(db: Database, settings: Settings) -> None:
    """Fetch the word list on first start when a sheet is configured."""
    log = logging.getLogger("agrivocab.import")
    if db.get_word_count() or not settings.sheets_url:
        return
    try:
        n = len(_import_catalog(db, settings))
        log.info("Imported %d words from %s", n, settings.sheets_url)
    except (CatalogUnavailable, InvalidConfiguration) as e:
        log.warning("Auto-import skipped: %s", e)


@app.on_event("startup")
async def startup():
    global _db, _settings, _context
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)
    if not os.environ.get("AGRIVOCAB_NO_AUTO_IMPORT"):
        _auto_import_if_empty(_db, _settings)
    _context = StudyContext(
        catalog=_db.get_catalog(),
        progress=_db.load_progress(),
        settings=_settings,
    )


@app.on_event("shutdown")
async def shutdown():
    if _db:
        _db.close()


# ── API: Stats ────────────────────────────────────────────────────────────

@app.get("/api/stats")
async def api_stats():
    ctx = get_context()
    stats = progress_stats(len(ctx.catalog), ctx.progress)
    stats["daily_goal"] = ctx.settings.daily_goal
    stats["recent"] = recent_history(ctx.progress)
    return stats


# ── API: Catalog ──────────────────────────────────────────────────────────

@app.get("/api/catalog")
async def api_catalog():
    ctx = get_context()
    return {
        "count": len(ctx.catalog),
        "meta": get_db().get_catalog_meta(),
        "words": [w.to_dict() for w in ctx.catalog],
    }


@app.post("/api/catalog/import")
async def api_catalog_import():
    ctx = get_context()
    try:
        records = _import_catalog(get_db(), get_settings())
    except InvalidConfiguration as e:
        raise HTTPException(400, str(e))
    except CatalogUnavailable as e:
        raise HTTPException(502, str(e))

    if len(records) != len(ctx.catalog):
        log.warning(
            "Catalog size changed (%d -> %d); saved progress indices may be stale",
            len(ctx.catalog), len(records),
        )
    ctx.catalog = records
    _active_sessions.clear()
    return {"words_imported": len(records), "total_words": len(records)}


# ── API: Learning sessions ────────────────────────────────────────────────

@app.post("/api/learn/start")
async def api_learn_start():
    ctx = _require_catalog()
    words = select_learning_batch(ctx.catalog, ctx.progress, ctx.settings.batch_size)
    if not words:
        return {"done": True, "session_id": None, "message": "Every word has been learned!"}

    session_id = _open_session({"kind": "learn", "words": words})
    return {
        "done": False,
        "session_id": session_id,
        "words": [w.to_dict() for w in words],
    }


@app.post("/api/learn/finish")
async def api_learn_finish(request: Request):
    body = await request.json()
    session = _pop_session(body.get("session_id"), "learn")
    ctx = get_context()
    complete_learning(get_db(), ctx.progress, session["words"])
    return {
        "learned_now": len(session["words"]),
        "learned_total": len(ctx.progress.learned),
    }


# ── API: Review sessions ──────────────────────────────────────────────────

def _question(session: dict) -> dict | None:
    idx = session["current_index"]
    if idx >= len(session["words"]):
        return None
    word = session["words"][idx]
    return {"position": idx + 1, "total": len(session["words"]), "korean": word.korean}


def _open_session(session: dict) -> int:
    """Register a session, dropping any unfinished one of the same kind."""
    stale = [sid for sid, s in _active_sessions.items() if s["kind"] == session["kind"]]
    for sid in stale:
        del _active_sessions[sid]
    session_id = next(_session_ids)
    _active_sessions[session_id] = session
    return session_id


def _get_session(session_id, kind: str) -> dict:
    session = _active_sessions.get(session_id)
    if session is None or session["kind"] != kind:
        raise HTTPException(404, "Session not found")
    return session


def _pop_session(session_id, kind: str) -> dict:
    session = _get_session(session_id, kind)
    del _active_sessions[session_id]
    return session


@app.post("/api/review/start")
async def api_review_start():
    ctx = _require_catalog()
    words = select_review_batch(ctx.catalog, ctx.progress, ctx.settings.batch_size)
    if not words:
        return {
            "empty": True,
            "session_id": None,
            "message": "Nothing to review yet. Finish a learning session first.",
        }

    session = {"kind": "review", "words": words, "results": [], "current_index": 0}
    session_id = _open_session(session)
    return {"empty": False, "session_id": session_id, "question": _question(session)}


@app.post("/api/review/answer")
async def api_review_answer(request: Request):
    body = await request.json()
    session = _get_session(body.get("session_id"), "review")
    idx = session["current_index"]
    if idx >= len(session["words"]):
        raise HTTPException(400, "No current question")

    word = session["words"][idx]
    result = grade_answer(word, str(body.get("answer", "")))
    session["results"].append(result)
    session["current_index"] += 1

    next_q = _question(session)
    return {
        "correct": result.is_correct,
        "answer": word.english,
        "user_answer": result.user_answer,
        "session_complete": next_q is None,
        "next_question": next_q,
    }


@app.post("/api/review/finish")
async def api_review_finish(request: Request):
    body = await request.json()
    session_id = body.get("session_id")
    session = _get_session(session_id, "review")
    if session["current_index"] < len(session["words"]):
        raise HTTPException(
            400,
            f"Answer all {len(session['words'])} questions before finishing the review.",
        )
    ctx = get_context()
    try:
        summary = complete_review(
            get_db(), ctx.progress, ctx.settings, session["words"], session["results"]
        )
    except (EmptyBatchError, IncompleteReviewError) as e:
        raise HTTPException(400, str(e))
    del _active_sessions[session_id]

    result = summary.to_dict()
    result["missed"] = [
        {"english": r.word.english, "korean": r.word.korean, "user_answer": r.user_answer}
        for r in session["results"] if not r.is_correct
    ]
    return result


# ── API: Progress ─────────────────────────────────────────────────────────

@app.get("/api/progress")
async def api_progress():
    return get_context().progress.to_dict()


@app.delete("/api/progress")
async def api_reset_progress():
    db = get_db()
    db.reset_progress()
    get_context().progress = db.load_progress()
    _active_sessions.clear()
    return {"reset": True}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await request.json()
    s = get_settings()
    # db_path is opened once at startup, so it is only read from config.json
    known = {f.name for f in Settings.__dataclass_fields__.values()} - {"db_path"}
    updated = Settings(**{**s.to_dict(), **{k: v for k, v in body.items() if k in known}})
    try:
        updated.validate()
    except InvalidConfiguration as e:
        raise HTTPException(400, str(e))
    for k, v in updated.to_dict().items():
        setattr(s, k, v)
    save_settings(s)
    return s.to_dict()
