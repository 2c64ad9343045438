from __future__ import annotations

from collections import Counter
from typing import Iterable, List

from lifesim.constants import LEVEL_ORDER
from lifesim.models import JobLevel, Profession


def validate_profession(profession: Profession) -> List[str]:
    errors: list[str] = []
    pid = profession.id

    if not pid:
        errors.append("profession id is required")
    levels = [rung.level for rung in profession.career_path]
    if len(levels) != len(LEVEL_ORDER):
        errors.append(f"{pid}: career path must have {len(LEVEL_ORDER)} rungs, found {len(levels)}")
    elif tuple(levels) != LEVEL_ORDER:
        order = ", ".join(level.value for level in levels)
        errors.append(f"{pid}: rungs must run entry, junior, mid, senior, executive (found {order})")

    for rung in profession.career_path:
        where = f"{pid}/{rung.level.value}"
        if rung.level == JobLevel.entry and rung.experience != 0:
            errors.append(f"{where}: entry rung must require 0 months of experience")
        if rung.experience < 0:
            errors.append(f"{where}: experience cannot be negative")
        if rung.salary <= 0:
            errors.append(f"{where}: salary must be positive")
        if rung.time_commitment <= 0:
            errors.append(f"{where}: time commitment must be positive")
        for skill, value in rung.skill_requirements.items():
            if value < 0:
                errors.append(f"{where}: requirement for {skill.value} cannot be negative")
        for skill, value in (rung.skill_gains or {}).items():
            if value < 0:
                errors.append(f"{where}: skill gain for {skill.value} cannot be negative")

    return errors


def validate_catalog(professions: Iterable[Profession]) -> List[str]:
    professions = list(professions)
    errors: list[str] = []
    counts = Counter(p.id for p in professions)
    for pid, count in counts.items():
        if count > 1:
            errors.append(f"duplicate profession id: {pid} ({count} entries)")
    for profession in professions:
        errors.extend(validate_profession(profession))
    return errors
