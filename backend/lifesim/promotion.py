from __future__ import annotations

import logging

from lifesim.catalog import CareerCatalog
from lifesim.constants import (
    REASON_NEEDS_BOTH,
    REASON_NEEDS_EXPERIENCE,
    REASON_NEEDS_SKILLS,
    REASON_TOP_OF_LADDER,
)
from lifesim.jobs import JobFactory
from lifesim.models import Job, PromotionResult, SkillMap, SkillSet

logger = logging.getLogger(__name__)


class PromotionEvaluator:
    """Decides whether a job holder may move up one rung.

    Evaluation never mutates the job or the skills, so a UI may poll it on
    every refresh. Applying a promotion is the caller's job: replace the
    current Job with ``result.next_job``.
    """

    def __init__(self, catalog: CareerCatalog, factory: JobFactory) -> None:
        self.catalog = catalog
        self.factory = factory

    def evaluate(self, job: Job, skills: SkillSet) -> PromotionResult:
        next_rung = self.catalog.get_next_rung(job.profession_id, job.job_level)
        if next_rung is None:
            return PromotionResult(
                eligible=False,
                reason=REASON_TOP_OF_LADDER,
                skills_met=False,
                experience_met=False,
            )

        experience_met = job.months_in_position >= next_rung.experience
        missing: SkillMap = {}
        for skill, minimum in next_rung.skill_requirements.items():
            current = skills.level(skill)
            if current < minimum:
                missing[skill] = minimum - current
        skills_met = not missing

        next_job = self.factory.instantiate(job.profession_id, next_rung, job.company)

        reason = None
        if not experience_met and not skills_met:
            reason = REASON_NEEDS_BOTH
        elif not experience_met:
            reason = REASON_NEEDS_EXPERIENCE
        elif not skills_met:
            reason = REASON_NEEDS_SKILLS
        logger.debug(
            "Promotion check %s -> %s: experience_met=%s skills_met=%s",
            job.id,
            next_job.id,
            experience_met,
            skills_met,
        )

        return PromotionResult(
            eligible=experience_met and skills_met,
            next_job=next_job,
            reason=reason,
            skills_met=skills_met,
            experience_met=experience_met,
            missing_skills=missing,
            months_remaining=max(0, next_rung.experience - job.months_in_position),
        )
