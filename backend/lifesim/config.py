from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import yaml


@dataclass
class AppConfig:
    mongo_uri: str
    mongo_db: str
    store: str
    data_dir: Optional[Path]
    catalog_path: Optional[Path]
    start_date: datetime
    history_count: int
    log_level: str


DEFAULT_CONFIG = {
    "mongo_uri": "mongodb://localhost:27017",
    "mongo_db": "lifesim",
    "store": "auto",
    "data_dir": "data",
    "catalog_path": None,
    "start_date": "2025-01-01",
    "history_count": 100,
    "log_level": "INFO",
}

STORE_KINDS = ("auto", "memory", "mongo")

ENV_KEY_MAP = {
    "LIFESIM_MONGO_URI": "mongo_uri",
    "LIFESIM_MONGO_DB": "mongo_db",
    "LIFESIM_STORE": "store",
    "LIFESIM_DATA_DIR": "data_dir",
    "LIFESIM_CATALOG_PATH": "catalog_path",
    "LIFESIM_START_DATE": "start_date",
    "LIFESIM_HISTORY_COUNT": "history_count",
    "LIFESIM_LOG_LEVEL": "log_level",
}


def _load_dotenv(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    env: dict[str, str] = {}
    with path.open("r", encoding="utf-8") as f:
        for raw_line in f:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export ") :].strip()
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            env[key] = value
    return env


def _apply_env(data: dict[str, Any], env: Any) -> None:
    for env_key, config_key in ENV_KEY_MAP.items():
        value = env.get(env_key)
        if value is None:
            continue
        value = value.strip()
        if value == "":
            continue
        data[config_key] = value


def _resolve_path(value: Any, base: Path) -> Optional[Path]:
    if value in (None, ""):
        return None
    path = Path(str(value))
    return path if path.is_absolute() else base / path


def parse_game_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"invalid date: {value!r}") from exc


def load_config(path: Union[str, Path]) -> AppConfig:
    data: dict[str, Any] = dict(DEFAULT_CONFIG)
    cfg_path = Path(path)
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError("config.yaml must be a mapping")
        data.update(loaded)
    dotenv_paths = [
        cfg_path.parent.parent / ".env",
        cfg_path.parent / ".env",
    ]
    for dotenv_path in dotenv_paths:
        _apply_env(data, _load_dotenv(dotenv_path))
    _apply_env(data, os.environ)

    store = str(data.get("store")).lower()
    if store not in STORE_KINDS:
        raise ValueError(f"store must be one of {', '.join(STORE_KINDS)}")
    base = cfg_path.parent
    return AppConfig(
        mongo_uri=str(data.get("mongo_uri")),
        mongo_db=str(data.get("mongo_db")),
        store=store,
        data_dir=_resolve_path(data.get("data_dir"), base),
        catalog_path=_resolve_path(data.get("catalog_path"), base),
        start_date=parse_game_date(data.get("start_date")),
        history_count=max(1, int(data.get("history_count"))),
        log_level=str(data.get("log_level")).upper(),
    )
