from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lifesim.catalog import CareerCatalog
from lifesim.catalog_loader import load_catalog
from lifesim.config import load_config, parse_game_date
from lifesim.db import open_store
from lifesim.errors import NotFoundError
from lifesim.jobs import JobFactory
from lifesim.models import JobLevel, ProfessionCategory, SkillSet
from lifesim.session import CareerSession

logger = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH = APP_ROOT / "config.yaml"


app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    config = load_config(CONFIG_PATH)
    logging.getLogger("lifesim").setLevel(config.log_level)
    catalog = load_catalog(config.catalog_path)
    store = await open_store(config)
    app.state.config = config
    app.state.catalog = catalog
    app.state.factory = JobFactory(catalog)
    app.state.store = store
    app.state.sessions = {}
    logger.info(
        "Career service ready: %d professions, %s store",
        len(catalog),
        "memory" if store.is_memory else "mongo",
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"ok": False, "error": "not_found", "reason": str(exc), "missing_id": exc.missing_id},
    )


def _profession_payload(catalog: CareerCatalog, profession: Any) -> dict[str, Any]:
    data = profession.model_dump(mode="json")
    data["category_label"] = catalog.category_label(profession.category)
    return data


def _new_session(character_id: str, **kwargs: Any) -> CareerSession:
    return CareerSession(
        app.state.store,
        app.state.catalog,
        character_id,
        factory=app.state.factory,
        history_count=app.state.config.history_count,
        **kwargs,
    )


async def _get_session(character_id: str) -> CareerSession:
    sessions: dict[str, CareerSession] = app.state.sessions
    session = sessions.get(character_id)
    if session is not None:
        return session
    session = _new_session(character_id, start_date=app.state.config.start_date)
    if not await session.hydrate():
        raise NotFoundError(f"Character not found: {character_id}", missing_id=character_id)
    sessions[character_id] = session
    return session


def _character_payload(session: CareerSession) -> dict[str, Any]:
    data = session.state.model_dump(mode="json")
    data["challenges"] = session.challenge_progress()
    return data


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/professions")
async def list_professions(category: str = Query(default="")) -> dict[str, Any]:
    catalog: CareerCatalog = app.state.catalog
    if category:
        try:
            professions = catalog.list_by_category(ProfessionCategory(category))
        except ValueError:
            return {"ok": False, "error": f"unknown category: {category}"}
    else:
        professions = catalog.professions()
    return {"professions": [_profession_payload(catalog, p) for p in professions]}


@app.get("/professions/{profession_id}")
async def get_profession(profession_id: str) -> dict[str, Any]:
    catalog: CareerCatalog = app.state.catalog
    return {"profession": _profession_payload(catalog, catalog.get_profession(profession_id))}


@app.get("/professions/{profession_id}/rungs/{level}")
async def get_rung(profession_id: str, level: str) -> dict[str, Any]:
    catalog: CareerCatalog = app.state.catalog
    rung = catalog.get_rung(profession_id, level)
    next_rung = catalog.get_next_rung(profession_id, rung.level)
    return {
        "rung": rung.model_dump(mode="json"),
        "next": next_rung.model_dump(mode="json") if next_rung is not None else None,
        "job": app.state.factory.instantiate(profession_id, rung).model_dump(mode="json"),
    }


@app.get("/categories")
async def list_categories() -> dict[str, Any]:
    catalog: CareerCatalog = app.state.catalog
    return {
        "categories": [
            {"id": category.value, "label": catalog.category_label(category)}
            for category in catalog.categories()
        ]
    }


@app.get("/jobs/entry")
async def entry_jobs() -> dict[str, Any]:
    return {"jobs": [job.model_dump(mode="json") for job in app.state.factory.entry_level_jobs()]}


@app.post("/characters")
async def create_character(payload: dict[str, Any]) -> dict[str, Any]:
    character_id = str(payload.get("character_id") or "").strip()
    if not character_id:
        return {"ok": False, "error": "character_id required"}
    try:
        start_date = parse_game_date(payload.get("start_date") or app.state.config.start_date)
        skills = SkillSet(**(payload.get("skills") or {}))
    except ValueError as exc:
        return {"ok": False, "error": str(exc)}
    session = _new_session(
        character_id,
        name=str(payload.get("name") or ""),
        skills=skills,
        start_date=start_date,
    )
    created = await session.ensure_character()
    app.state.sessions[character_id] = session
    return {"ok": True, "created": created, "character": _character_payload(session)}


@app.get("/characters/{character_id}")
async def get_character(character_id: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    return {"character": _character_payload(session)}


@app.post("/characters/{character_id}/hire")
async def hire(character_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    profession_id = payload.get("profession_id")
    if not profession_id:
        return {"ok": False, "error": "profession_id required"}
    session = await _get_session(character_id)
    result = await session.hire(
        profession_id,
        payload.get("level") or JobLevel.entry,
        payload.get("company"),
    )
    return result.model_dump(mode="json")


@app.get("/characters/{character_id}/jobs")
async def available_jobs(character_id: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    return {"jobs": [job.model_dump(mode="json") for job in session.available_jobs()]}


@app.get("/characters/{character_id}/promotion")
async def promotion_status(character_id: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    result = session.evaluate_promotion()
    if result is None:
        return {"ok": False, "error": "no current job"}
    return {"ok": True, "promotion": result.model_dump(mode="json")}


@app.post("/characters/{character_id}/promotion")
async def promote(character_id: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    result = await session.promote()
    return result.model_dump(mode="json")


@app.post("/characters/{character_id}/time")
async def advance_time(character_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    session = await _get_session(character_id)
    try:
        if payload.get("date"):
            new_date = parse_game_date(payload["date"])
        elif payload.get("days") is not None:
            new_date = session.state.game_date + timedelta(days=int(payload["days"]))
        else:
            return {"ok": False, "error": "date or days required"}
    except (ValueError, OverflowError) as exc:
        return {"ok": False, "error": str(exc)}
    ready = await session.advance_time(new_date)
    return {
        "ok": True,
        "game_date": session.state.game_date.isoformat(),
        "ready": [c.model_dump(mode="json") for c in ready],
        "character": _character_payload(session),
    }


@app.get("/characters/{character_id}/challenges")
async def list_challenges(character_id: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    return {"challenges": session.challenge_progress()}


@app.post("/characters/{character_id}/challenges/{challenge_id}/{action}")
async def challenge_action(character_id: str, challenge_id: str, action: str) -> dict[str, Any]:
    session = await _get_session(character_id)
    handlers = {
        "start": session.start_challenge,
        "abandon": session.abandon_challenge,
        "complete": session.complete_challenge,
    }
    handler = handlers.get(action)
    if handler is None:
        return {"ok": False, "error": f"unknown action: {action}"}
    result = await handler(challenge_id)
    return result.model_dump(mode="json")


@app.get("/characters/{character_id}/events")
async def list_events(character_id: str, limit: int = Query(default=0, ge=0)) -> dict[str, Any]:
    session = await _get_session(character_id)
    events = await session.events(limit or None)
    return {"events": [e.model_dump(mode="json") for e in events]}
