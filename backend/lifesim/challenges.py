from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from lifesim.catalog import CareerCatalog
from lifesim.constants import (
    CHALLENGE_TEMPLATES,
    CHALLENGE_TIERS,
    DAYS_PER_MONTH,
    HARD_CHALLENGE_MIN_LEVEL,
    PROMOTION_CHALLENGE_TEMPLATE,
    PROMOTION_CHALLENGE_TIER,
    SKILL_LABELS,
)
from lifesim.models import (
    CareerPath,
    Challenge,
    ChallengeDifficulty,
    ChallengeKey,
    ChallengeProgress,
    ChallengeState,
    ChallengeTrack,
    ErrorKind,
    Job,
    SkillMap,
    SkillName,
    SkillSet,
    TransitionResult,
)

logger = logging.getLogger(__name__)

SkillSink = Callable[[SkillName, int], Any]


def months_between(start: datetime, now: datetime) -> int:
    """Whole 30-day months elapsed; a clock behind the start counts as zero."""
    return max(0, (now - start).days // DAYS_PER_MONTH)


def _invalid(reason: str, challenge: Optional[Challenge] = None, **extra: Any) -> TransitionResult:
    return TransitionResult(
        ok=False,
        error=ErrorKind.invalid_transition,
        reason=reason,
        challenge=challenge.model_copy() if challenge is not None else None,
        **extra,
    )


def _not_found(challenge_id: str) -> TransitionResult:
    return TransitionResult(ok=False, error=ErrorKind.not_found, reason=f"Challenge not found: {challenge_id}")


def _pick_promotion_skill(next_rung: CareerPath, skills: SkillSet) -> Optional[SkillName]:
    requirements = next_rung.skill_requirements
    if not requirements:
        return None
    order = list(SkillName)
    shortfalls = {skill: req - skills.level(skill) for skill, req in requirements.items()}
    lacking = [skill for skill, gap in shortfalls.items() if gap > 0]
    if lacking:
        return min(lacking, key=lambda s: (-shortfalls[s], -requirements[s], order.index(s)))
    return min(requirements, key=lambda s: (-requirements[s], order.index(s)))


class ChallengeEngine:
    """Time-gated skill challenges for one character's job.

    Challenges move not_started -> in_progress -> ready_for_completion ->
    completed, with abandon returning an in-progress challenge to
    not_started. Only one challenge may be in progress at a time. Progress is
    derived from ``start_date`` and the game clock, so a list reloaded from a
    store resumes exactly where it was.
    """

    def __init__(self, catalog: CareerCatalog) -> None:
        self.catalog = catalog

    def generate(
        self, job: Job, skills: SkillSet, next_rung: Optional[CareerPath] = None
    ) -> list[Challenge]:
        challenges: list[Challenge] = []
        for skill in SkillName:
            if job.skill_gains.get(skill, 0) <= 0:
                continue
            challenges.append(self._build(job, skill, ChallengeDifficulty.easy))
            challenges.append(self._build(job, skill, ChallengeDifficulty.medium))
            if skills.level(skill) >= HARD_CHALLENGE_MIN_LEVEL:
                challenges.append(self._build(job, skill, ChallengeDifficulty.hard))

        if next_rung is not None:
            skill = _pick_promotion_skill(next_rung, skills)
            if skill is not None:
                challenges.append(self._build_promotion(job, next_rung, skill))
        return challenges

    def generate_for_job(self, job: Job, skills: SkillSet) -> list[Challenge]:
        next_rung = self.catalog.get_next_rung(job.profession_id, job.job_level)
        return self.generate(job, skills, next_rung)

    def merge(self, existing: Iterable[Challenge], generated: Iterable[Challenge]) -> list[Challenge]:
        existing = list(existing)
        by_id = {c.id: c for c in existing}
        merged: list[Challenge] = []
        seen: set[str] = set()
        for challenge in generated:
            merged.append(by_id.get(challenge.id, challenge))
            seen.add(challenge.id)
        for challenge in existing:
            if challenge.id not in seen and challenge.state != ChallengeState.not_started:
                merged.append(challenge)
        return merged

    def find(self, challenges: Iterable[Challenge], challenge_id: str) -> Optional[Challenge]:
        for challenge in challenges:
            if challenge.id == challenge_id:
                return challenge
        return None

    def active(self, challenges: Iterable[Challenge]) -> Optional[Challenge]:
        for challenge in challenges:
            if challenge.state == ChallengeState.in_progress:
                return challenge
        return None

    def start(self, challenges: list[Challenge], challenge_id: str, now: datetime) -> TransitionResult:
        challenge = self.find(challenges, challenge_id)
        if challenge is None:
            return _not_found(challenge_id)
        if challenge.state == ChallengeState.completed:
            return _invalid("already completed", challenge)
        if challenge.state == ChallengeState.ready_for_completion:
            return _invalid("already finished, ready for completion", challenge)
        if challenge.state == ChallengeState.in_progress:
            return _invalid("already in progress", challenge)
        running = self.active(challenges)
        if running is not None:
            return _invalid(f"another challenge is already in progress: {running.title}", challenge)

        challenge.state = ChallengeState.in_progress
        challenge.start_date = now
        logger.info("Challenge %s started at %s", challenge.id, now.date().isoformat())
        return TransitionResult(ok=True, challenge=challenge.model_copy(), months_remaining=challenge.completion_time)

    def tick(self, challenges: Iterable[Challenge], now: datetime) -> list[Challenge]:
        ready: list[Challenge] = []
        for challenge in challenges:
            if challenge.state != ChallengeState.in_progress or challenge.start_date is None:
                continue
            if months_between(challenge.start_date, now) >= challenge.completion_time:
                challenge.state = ChallengeState.ready_for_completion
                logger.info("Challenge %s is ready for completion", challenge.id)
                ready.append(challenge.model_copy())
        return ready

    def abandon(self, challenges: list[Challenge], challenge_id: str) -> TransitionResult:
        challenge = self.find(challenges, challenge_id)
        if challenge is None:
            return _not_found(challenge_id)
        if challenge.state != ChallengeState.in_progress:
            return _invalid("only a challenge in progress can be abandoned", challenge)
        challenge.state = ChallengeState.not_started
        challenge.start_date = None
        logger.info("Challenge %s abandoned", challenge.id)
        return TransitionResult(ok=True, challenge=challenge.model_copy())

    def complete(
        self,
        challenges: list[Challenge],
        challenge_id: str,
        now: datetime,
        sink: SkillSink,
    ) -> TransitionResult:
        challenge = self.find(challenges, challenge_id)
        if challenge is None:
            return _not_found(challenge_id)
        if challenge.state == ChallengeState.completed:
            return _invalid("already completed", challenge)
        if challenge.state == ChallengeState.not_started:
            return _invalid("must be started first", challenge)
        if challenge.state == ChallengeState.in_progress:
            passed = months_between(challenge.start_date, now) if challenge.start_date else 0
            remaining = challenge.completion_time - passed
            if remaining > 0:
                unit = "month" if remaining == 1 else "months"
                return _invalid(
                    f"{remaining} more {unit} until this challenge can be completed",
                    challenge,
                    months_remaining=remaining,
                )
            challenge.state = ChallengeState.ready_for_completion

        challenge.state = ChallengeState.completed
        challenge.start_date = None
        challenge.completed_at = now
        sink(challenge.skill, challenge.xp_reward)
        logger.info(
            "Challenge %s completed, +%d %s", challenge.id, challenge.xp_reward, challenge.skill.value
        )
        return TransitionResult(
            ok=True,
            challenge=challenge.model_copy(),
            skill=challenge.skill,
            amount=challenge.xp_reward,
        )

    def train(self, job: Job, months: int, sink: SkillSink) -> SkillMap:
        """Apply the job's monthly skill gains for ``months`` elapsed months."""
        applied: SkillMap = {}
        if months <= 0:
            return applied
        for skill in SkillName:
            gain = job.skill_gains.get(skill, 0)
            if gain <= 0:
                continue
            applied[skill] = gain * months
            sink(skill, applied[skill])
        return applied

    def progress(self, challenge: Challenge, now: datetime) -> ChallengeProgress:
        total_days = challenge.completion_time * DAYS_PER_MONTH
        if challenge.state in (ChallengeState.ready_for_completion, ChallengeState.completed):
            days_passed = total_days
        elif challenge.state == ChallengeState.in_progress and challenge.start_date is not None:
            days_passed = max(0, (now - challenge.start_date).days)
        else:
            days_passed = 0
        months_passed = days_passed // DAYS_PER_MONTH
        percent = 100.0 if total_days == 0 else min(100.0, days_passed / total_days * 100)
        return ChallengeProgress(
            challenge_id=challenge.id,
            days_passed=days_passed,
            months_passed=months_passed,
            days_remaining=max(0, total_days - days_passed),
            months_remaining=max(0, challenge.completion_time - months_passed),
            percent=round(percent, 1),
        )

    def _build(self, job: Job, skill: SkillName, difficulty: ChallengeDifficulty) -> Challenge:
        reward, months = CHALLENGE_TIERS[difficulty]
        key = ChallengeKey(
            profession_id=job.profession_id,
            level=job.job_level,
            skill=skill,
            difficulty=difficulty,
        )
        title, description = CHALLENGE_TEMPLATES[difficulty]
        label = SKILL_LABELS[skill]
        return Challenge(
            id=key.slug,
            key=key,
            title=title.format(skill=label),
            description=description.format(skill_lower=label.lower(), title=job.title),
            skill=skill,
            difficulty=difficulty,
            xp_reward=reward,
            completion_time=months,
        )

    def _build_promotion(self, job: Job, next_rung: CareerPath, skill: SkillName) -> Challenge:
        reward, months = PROMOTION_CHALLENGE_TIER
        key = ChallengeKey(
            profession_id=job.profession_id,
            level=next_rung.level,
            skill=skill,
            difficulty=ChallengeDifficulty.medium,
            track=ChallengeTrack.promotion,
        )
        title, description = PROMOTION_CHALLENGE_TEMPLATE
        label = SKILL_LABELS[skill]
        return Challenge(
            id=key.slug,
            key=key,
            title=f"{title.format(next_title=next_rung.title)}: {label}",
            description=description.format(skill_lower=label.lower(), next_title=next_rung.title),
            skill=skill,
            difficulty=ChallengeDifficulty.medium,
            xp_reward=reward,
            completion_time=months,
        )
