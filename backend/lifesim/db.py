from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from lifesim.config import AppConfig

logger = logging.getLogger(__name__)


class MongoStore:
    def __init__(self, config: AppConfig) -> None:
        self.client = AsyncIOMotorClient(config.mongo_uri, serverSelectionTimeoutMS=2000)
        self.db = self.client[config.mongo_db]
        self.characters = self.db["characters"]
        self.events = self.db["events"]
        self.is_memory = False

    async def ping(self) -> None:
        await self.client.admin.command("ping")


class MemoryCursor:
    def __init__(self, items: list[dict[str, Any]]) -> None:
        self._items = items

    def sort(self, key: str, direction: int) -> "MemoryCursor":
        reverse = direction < 0
        self._items.sort(key=lambda item: item.get(key), reverse=reverse)
        return self

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        async def iterator() -> AsyncIterator[dict[str, Any]]:
            for item in self._items:
                yield item

        return iterator()


def _matches(item: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(item.get(k) == v for k, v in query.items())


class MemoryCollection:
    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = []

    async def find_one(self, query: dict[str, Any]) -> Optional[dict[str, Any]]:
        for item in self.items:
            if _matches(item, query):
                return item
        return None

    async def insert_one(self, doc: dict[str, Any]) -> None:
        self.items.append(doc)

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> None:
        target = await self.find_one(query)
        if target is None:
            if not upsert:
                return
            target = dict(query)
            self.items.append(target)
        if "$set" in update:
            target.update(update["$set"])

    def find(self, query: dict[str, Any]) -> MemoryCursor:
        return MemoryCursor([item for item in self.items if _matches(item, query)])


class FileBackedCollection(MemoryCollection):
    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path
        if path.exists():
            try:
                self.items = json.loads(path.read_text(encoding="utf-8"))
            except ValueError:
                logger.warning("Ignoring unreadable store file %s", path)
                self.items = []

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> None:
        await super().update_one(query, update, upsert=upsert)
        self._flush()

    def _flush(self) -> None:
        self.path.write_text(json.dumps(self.items, ensure_ascii=False, indent=2), encoding="utf-8")


class MemoryStore:
    def __init__(self, base_path: Optional[Path] = None) -> None:
        if base_path is not None:
            base_path.mkdir(parents=True, exist_ok=True)
        self.events = MemoryCollection()
        if base_path is None:
            self.characters = MemoryCollection()
        else:
            self.characters = FileBackedCollection(base_path / "characters.json")
        self.is_memory = True


async def open_store(config: AppConfig) -> Any:
    if config.store == "memory":
        return MemoryStore(config.data_dir)
    store = MongoStore(config)
    if config.store == "mongo":
        await store.ping()
        return store
    try:
        await store.ping()
    except Exception as exc:
        logger.warning("MongoDB unavailable (%s), falling back to in-memory store", exc)
        return MemoryStore(config.data_dir)
    return store
