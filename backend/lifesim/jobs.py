from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Union

from lifesim.catalog import CareerCatalog
from lifesim.constants import (
    BASE_STRESS_BY_LEVEL,
    BASELINE_WEEKLY_HOURS,
    DEFAULT_COMPANY,
    LEVEL_ORDER,
    MAX_STRESS,
    MIN_STRESS,
    SKILL_GAIN_CAP,
)
from lifesim.models import CareerPath, Job, JobLevel, ProfessionCategory, SkillMap, SkillName, SkillSet

logger = logging.getLogger(__name__)

CompanyNameProvider = Callable[[ProfessionCategory], Optional[str]]


def compute_stress(rung: CareerPath) -> float:
    time_factor = (rung.time_commitment - BASELINE_WEEKLY_HOURS) / 2
    skill_factor = sum(rung.skill_requirements.values()) / 30
    raw = BASE_STRESS_BY_LEVEL[rung.level] + time_factor + skill_factor
    return min(MAX_STRESS, max(MIN_STRESS, raw))


def derive_skill_gains(rung: CareerPath) -> SkillMap:
    """Explicit gains win; otherwise skills the rung demands grow faster."""
    if rung.skill_gains:
        return dict(rung.skill_gains)
    return {skill: max(1, req // 10) for skill, req in rung.skill_requirements.items()}


def cap_skill_gains(gains: Mapping[SkillName, int], max_gain: int = SKILL_GAIN_CAP) -> SkillMap:
    return {skill: min(value, max_gain) for skill, value in gains.items()}


def meets_skill_requirements(skills: SkillSet, requirements: Mapping[SkillName, int]) -> bool:
    return all(skills.level(skill) >= minimum for skill, minimum in requirements.items())


class JobFactory:
    def __init__(
        self,
        catalog: CareerCatalog,
        company_provider: Optional[CompanyNameProvider] = None,
    ) -> None:
        self.catalog = catalog
        self.company_provider = company_provider

    def instantiate(
        self, profession_id: str, rung: CareerPath, company: Optional[str] = None
    ) -> Job:
        profession = self.catalog.get_profession(profession_id)
        company_name = company or self._company_for(profession.category)
        return Job(
            id=f"{profession_id}-{rung.level.value}",
            title=rung.title,
            company=company_name,
            salary=rung.salary,
            stress=compute_stress(rung),
            happiness_impact=rung.happiness_impact,
            prestige_impact=rung.prestige_impact,
            time_commitment=rung.time_commitment,
            skill_gains=cap_skill_gains(derive_skill_gains(rung)),
            skill_requirements=dict(rung.skill_requirements),
            profession_id=profession_id,
            job_level=rung.level,
            months_in_position=0,
            experience_required=rung.experience,
            health_impact=rung.health_impact,
        )

    def instantiate_level(
        self,
        profession_id: str,
        level: Union[JobLevel, str] = JobLevel.entry,
        company: Optional[str] = None,
    ) -> Job:
        return self.instantiate(profession_id, self.catalog.get_rung(profession_id, level), company)

    def entry_level_jobs(self) -> list[Job]:
        return [
            self.instantiate(p.id, self.catalog.get_rung(p.id, JobLevel.entry))
            for p in self.catalog.professions()
        ]

    def jobs_available_for_skills(self, skills: SkillSet) -> list[Job]:
        available: list[Job] = []
        for profession in self.catalog.professions():
            for rung in profession.career_path:
                # rungs that need tenure are reached by promotion, not hiring
                if rung.experience > 0:
                    continue
                if meets_skill_requirements(skills, rung.skill_requirements):
                    available.append(self.instantiate(profession.id, rung))
        return available

    def career_overview(self, profession_id: str, level: Union[JobLevel, str]) -> dict[str, object]:
        current = self.catalog.get_rung(profession_id, level)
        profession = self.catalog.get_profession(profession_id)
        return {
            "current": current,
            "career_path": list(profession.career_path),
            "next": self.catalog.get_next_rung(profession_id, level),
            "rung_index": LEVEL_ORDER.index(current.level),
        }

    def _company_for(self, category: ProfessionCategory) -> str:
        if self.company_provider is not None:
            name = self.company_provider(category)
            if name:
                return name
        logger.debug("No company name for %s, using placeholder", category.value)
        return DEFAULT_COMPANY
