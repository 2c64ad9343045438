from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from lifesim.catalog_validation import validate_catalog
from lifesim.constants import CATEGORY_LABELS, LEVEL_ORDER
from lifesim.errors import CatalogError, NotFoundError
from lifesim.models import CareerPath, JobLevel, Profession, ProfessionCategory

logger = logging.getLogger(__name__)


def _coerce_level(level: Union[JobLevel, str]) -> Optional[JobLevel]:
    try:
        return JobLevel(level)
    except ValueError:
        return None


class CareerCatalog:
    """Read-only registry of professions and their five-rung ladders.

    Built once at startup and handed to the job factory and the promotion
    evaluator. Duplicate profession ids are rejected rather than shadowed.
    """

    def __init__(self, professions: Iterable[Profession]) -> None:
        items = list(professions)
        errors = validate_catalog(items)
        if errors:
            raise CatalogError(errors)
        self._order = tuple(items)
        self._by_id = {p.id: p for p in items}
        self._rungs = {
            p.id: {rung.level: rung for rung in p.career_path} for p in items
        }
        logger.info("Loaded career catalog with %d professions", len(items))

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, profession_id: object) -> bool:
        return profession_id in self._by_id

    def professions(self) -> list[Profession]:
        return list(self._order)

    def get_profession(self, profession_id: str) -> Profession:
        profession = self._by_id.get(profession_id)
        if profession is None:
            raise NotFoundError(f"Profession not found: {profession_id}", missing_id=profession_id)
        return profession

    def get_rung(self, profession_id: str, level: Union[JobLevel, str]) -> CareerPath:
        self.get_profession(profession_id)
        parsed = _coerce_level(level)
        rung = self._rungs[profession_id].get(parsed) if parsed is not None else None
        if rung is None:
            raise NotFoundError(
                f"Job level not found: {level} in profession {profession_id}",
                missing_id=f"{profession_id}/{level}",
            )
        return rung

    def get_next_rung(
        self, profession_id: str, current_level: Union[JobLevel, str]
    ) -> Optional[CareerPath]:
        parsed = _coerce_level(current_level)
        if parsed is None:
            return None
        index = LEVEL_ORDER.index(parsed)
        if index == len(LEVEL_ORDER) - 1:
            return None
        return self.get_rung(profession_id, LEVEL_ORDER[index + 1])

    def list_by_category(self, category: Union[ProfessionCategory, str]) -> list[Profession]:
        category = ProfessionCategory(category)
        return [p for p in self._order if p.category == category]

    def categories(self) -> list[ProfessionCategory]:
        used = {p.category for p in self._order}
        return [c for c in ProfessionCategory if c in used]

    @staticmethod
    def category_label(category: Union[ProfessionCategory, str]) -> str:
        return CATEGORY_LABELS[ProfessionCategory(category)]
