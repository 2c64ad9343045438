from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from lifesim.actions import add_months_in_position, apply_skill_increment, replace_job
from lifesim.catalog import CareerCatalog
from lifesim.challenges import ChallengeEngine, SkillSink, months_between
from lifesim.constants import DAYS_PER_MONTH, REASON_NEEDS_SKILLS, REASON_PROMOTION_ONLY
from lifesim.jobs import JobFactory, meets_skill_requirements
from lifesim.models import (
    CareerEvent,
    Challenge,
    CharacterState,
    ErrorKind,
    EventType,
    Job,
    JobLevel,
    PromotionResult,
    SkillName,
    SkillSet,
    TransitionResult,
)
from lifesim.promotion import PromotionEvaluator

logger = logging.getLogger(__name__)


class CareerSession:
    """One character's career: job, skills, challenges and the game clock.

    The state document is persisted after every change and each change is
    logged as a ``CareerEvent``. Skills only grow through the challenge
    engine's sink.
    """

    def __init__(
        self,
        store: Any,
        catalog: CareerCatalog,
        character_id: str,
        *,
        start_date: datetime,
        name: str = "",
        skills: Optional[SkillSet] = None,
        factory: Optional[JobFactory] = None,
        history_count: int = 100,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.factory = factory or JobFactory(catalog)
        self.evaluator = PromotionEvaluator(catalog, self.factory)
        self.engine = ChallengeEngine(catalog)
        self.history_count = history_count
        self.state = CharacterState(
            character_id=character_id,
            name=name or character_id,
            skills=skills or SkillSet(),
            game_date=start_date,
            month_anchor=start_date,
        )

    @property
    def character_id(self) -> str:
        return self.state.character_id

    async def hydrate(self) -> bool:
        doc = await self.store.characters.find_one({"_id": self.character_id})
        if not doc:
            return False
        self.state = CharacterState(**doc)
        if self.state.job is not None:
            self._regenerate_challenges()
        return True

    async def ensure_character(self) -> bool:
        """Load the stored character, or store the fresh one. True when created."""
        if await self.hydrate():
            return False
        await self._persist()
        logger.info("Created character %s", self.character_id)
        return True

    async def hire(
        self,
        profession_id: str,
        level: Union[JobLevel, str] = JobLevel.entry,
        company: Optional[str] = None,
    ) -> TransitionResult:
        rung = self.catalog.get_rung(profession_id, level)
        if rung.level != JobLevel.entry:
            if rung.experience > 0:
                reason = REASON_PROMOTION_ONLY
            elif not meets_skill_requirements(self.state.skills, rung.skill_requirements):
                reason = REASON_NEEDS_SKILLS
            else:
                reason = None
            if reason is not None:
                return TransitionResult(ok=False, error=ErrorKind.requirements_unmet, reason=reason)

        job = self.factory.instantiate(profession_id, rung, company)
        diff = replace_job(self.state, job)
        self._regenerate_challenges()
        await self._persist()
        await self._record_event(
            EventType.hired, f"Hired as {job.title} at {job.company}.", diff
        )
        logger.info("Character %s hired as %s", self.character_id, job.id)
        return TransitionResult(ok=True, job=job)

    def available_jobs(self) -> list[Job]:
        """Entry rungs of every profession plus any other rung the skills qualify for."""
        jobs = self.factory.entry_level_jobs()
        seen = {job.id for job in jobs}
        for job in self.factory.jobs_available_for_skills(self.state.skills):
            if job.id not in seen:
                jobs.append(job)
                seen.add(job.id)
        return jobs

    def evaluate_promotion(self) -> Optional[PromotionResult]:
        if self.state.job is None:
            return None
        return self.evaluator.evaluate(self.state.job, self.state.skills)

    async def promote(self) -> TransitionResult:
        result = self.evaluate_promotion()
        if result is None:
            return TransitionResult(
                ok=False, error=ErrorKind.requirements_unmet, reason="no current job"
            )
        if not result.eligible:
            await self._record_event(
                EventType.promotion_denied,
                f"Promotion denied: {result.reason}.",
                result.model_dump(mode="json", include={"reason", "missing_skills", "months_remaining"}),
            )
            return TransitionResult(
                ok=False,
                error=ErrorKind.requirements_unmet,
                reason=result.reason,
                months_remaining=result.months_remaining,
            )

        job = result.next_job
        diff = replace_job(self.state, job)
        self._regenerate_challenges()
        await self._persist()
        await self._record_event(EventType.promoted, f"Promoted to {job.title}.", diff)
        logger.info("Character %s promoted to %s", self.character_id, job.id)
        return TransitionResult(ok=True, job=job)

    async def advance_time(self, new_date: datetime) -> list[Challenge]:
        """Move the game clock forward. Returns challenges that just became ready."""
        if new_date <= self.state.game_date:
            logger.debug("Ignoring clock update to %s", new_date.isoformat())
            return []
        self.state.game_date = new_date
        pending: list[dict[str, Any]] = []

        months = months_between(self.state.month_anchor, new_date)
        if months > 0:
            self.state.month_anchor += timedelta(days=months * DAYS_PER_MONTH)
            self.state.months_elapsed += months
            job = self.state.job
            if job is not None:
                add_months_in_position(self.state, months)
                self.engine.train(job, months, self._skill_sink(pending))
                self._regenerate_challenges()

        ready = self.engine.tick(self.state.challenges, new_date)
        await self._persist()

        if months > 0:
            await self._record_event(
                EventType.month_passed,
                f"{months} month(s) passed.",
                {"months": months, "months_elapsed": self.state.months_elapsed},
            )
        await self._record_skill_events(pending)
        for challenge in ready:
            await self._record_event(
                EventType.challenge_ready,
                f"{challenge.title} is ready for completion.",
                {"challenge_id": challenge.id},
            )
        return ready

    async def start_challenge(self, challenge_id: str) -> TransitionResult:
        result = self.engine.start(self.state.challenges, challenge_id, self.state.game_date)
        if result.ok:
            await self._persist()
            await self._record_event(
                EventType.challenge_started,
                f"Started {result.challenge.title}.",
                {"challenge_id": challenge_id, "months_remaining": result.months_remaining},
            )
        return result

    async def abandon_challenge(self, challenge_id: str) -> TransitionResult:
        result = self.engine.abandon(self.state.challenges, challenge_id)
        if result.ok:
            await self._persist()
            await self._record_event(
                EventType.challenge_abandoned,
                f"Abandoned {result.challenge.title}.",
                {"challenge_id": challenge_id},
            )
        return result

    async def complete_challenge(self, challenge_id: str) -> TransitionResult:
        pending: list[dict[str, Any]] = []
        result = self.engine.complete(
            self.state.challenges, challenge_id, self.state.game_date, self._skill_sink(pending)
        )
        if result.ok:
            if self.state.job is not None:
                self._regenerate_challenges()
            await self._persist()
            await self._record_event(
                EventType.challenge_completed,
                f"Completed {result.challenge.title}.",
                {"challenge_id": challenge_id, "skill": result.skill.value, "amount": result.amount},
            )
            await self._record_skill_events(pending)
        return result

    async def refresh_challenges(self) -> list[Challenge]:
        if self.state.job is not None:
            self._regenerate_challenges()
            await self._persist()
        return list(self.state.challenges)

    def challenge_progress(self) -> list[dict[str, Any]]:
        now = self.state.game_date
        return [
            {
                **challenge.model_dump(mode="json"),
                "progress": self.engine.progress(challenge, now).model_dump(mode="json"),
            }
            for challenge in self.state.challenges
        ]

    async def events(self, limit: Optional[int] = None) -> list[CareerEvent]:
        if not limit or limit < 0:
            limit = self.history_count
        cursor = self.store.events.find({"character_id": self.character_id}).sort("timestamp", 1)
        data = [CareerEvent(**doc) async for doc in cursor]
        return data[-limit:]

    def _regenerate_challenges(self) -> None:
        generated = self.engine.generate_for_job(self.state.job, self.state.skills)
        self.state.challenges = self.engine.merge(self.state.challenges, generated)

    def _skill_sink(self, pending: list[dict[str, Any]]) -> SkillSink:
        def sink(skill: SkillName, amount: int) -> None:
            pending.append(apply_skill_increment(self.state, skill, amount))

        return sink

    async def _record_skill_events(self, pending: list[dict[str, Any]]) -> None:
        for diff in pending:
            increment = diff["increment"]
            await self._record_event(
                EventType.skill_increased,
                f"{increment['skill'].capitalize()} +{increment['amount']}.",
                diff,
            )

    async def _persist(self) -> None:
        await self.store.characters.update_one(
            {"_id": self.character_id},
            {"$set": self.state.model_dump(mode="json")},
            upsert=True,
        )

    def _make_event(self, event_type: EventType, message: str, payload: Optional[dict[str, Any]] = None) -> CareerEvent:
        return CareerEvent(
            timestamp=datetime.utcnow(),
            character_id=self.character_id,
            event_type=event_type,
            game_date=self.state.game_date,
            message=message,
            payload=payload or {},
        )

    async def _record_event(
        self, event_type: EventType, message: str, payload: Optional[dict[str, Any]] = None
    ) -> CareerEvent:
        event = self._make_event(event_type, message, payload)
        await self.store.events.insert_one(event.model_dump())
        return event
