from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SkillName(str, Enum):
    intelligence = "intelligence"
    creativity = "creativity"
    charisma = "charisma"
    technical = "technical"
    leadership = "leadership"
    physical = "physical"


class JobLevel(str, Enum):
    entry = "entry"
    junior = "junior"
    mid = "mid"
    senior = "senior"
    executive = "executive"


class ProfessionCategory(str, Enum):
    technology = "technology"
    finance = "finance"
    healthcare = "healthcare"
    education = "education"
    creative = "creative"
    business = "business"
    legal = "legal"
    science = "science"
    government = "government"
    trade = "trade"


class ChallengeDifficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class ChallengeState(str, Enum):
    not_started = "not_started"
    in_progress = "in_progress"
    ready_for_completion = "ready_for_completion"
    completed = "completed"


class ErrorKind(str, Enum):
    not_found = "not_found"
    invalid_transition = "invalid_transition"
    requirements_unmet = "requirements_unmet"


class EventType(str, Enum):
    hired = "hired"
    promoted = "promoted"
    promotion_denied = "promotion_denied"
    challenge_started = "challenge_started"
    challenge_ready = "challenge_ready"
    challenge_abandoned = "challenge_abandoned"
    challenge_completed = "challenge_completed"
    skill_increased = "skill_increased"
    month_passed = "month_passed"


SkillMap = dict[SkillName, int]


class SkillSet(BaseModel):
    intelligence: int = Field(0, ge=0)
    creativity: int = Field(0, ge=0)
    charisma: int = Field(0, ge=0)
    technical: int = Field(0, ge=0)
    leadership: int = Field(0, ge=0)
    physical: int = Field(0, ge=0)

    def level(self, skill: SkillName) -> int:
        return int(getattr(self, SkillName(skill).value))

    def as_dict(self) -> dict[SkillName, int]:
        return {skill: self.level(skill) for skill in SkillName}


class CareerPath(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: JobLevel
    title: str
    salary: int
    description: str
    skill_requirements: SkillMap = Field(default_factory=dict)
    skill_gains: Optional[SkillMap] = None
    happiness_impact: int = 0
    prestige_impact: int = 0
    time_commitment: int = 40
    experience: int = 0
    health_impact: Optional[int] = None


class Profession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: ProfessionCategory
    description: str
    career_path: list[CareerPath]


class Job(BaseModel):
    id: str
    title: str
    company: str
    salary: int
    stress: float
    happiness_impact: int
    prestige_impact: int
    time_commitment: int
    skill_gains: SkillMap = Field(default_factory=dict)
    skill_requirements: SkillMap = Field(default_factory=dict)
    profession_id: str
    job_level: JobLevel
    months_in_position: int = 0
    experience_required: int = 0
    health_impact: Optional[int] = None


class ChallengeTrack(str, Enum):
    job = "job"
    promotion = "promotion"


class ChallengeKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    profession_id: str
    level: JobLevel
    skill: SkillName
    difficulty: ChallengeDifficulty
    track: ChallengeTrack = ChallengeTrack.job

    @property
    def slug(self) -> str:
        parts = [self.profession_id, self.level.value, self.skill.value, self.difficulty.value]
        if self.track != ChallengeTrack.job:
            parts.append(self.track.value)
        return ".".join(parts)


class Challenge(BaseModel):
    id: str
    key: ChallengeKey
    title: str
    description: str
    skill: SkillName
    difficulty: ChallengeDifficulty
    xp_reward: int
    completion_time: int
    state: ChallengeState = ChallengeState.not_started
    start_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ChallengeProgress(BaseModel):
    challenge_id: str
    days_passed: int
    months_passed: int
    days_remaining: int
    months_remaining: int
    percent: float


class PromotionResult(BaseModel):
    eligible: bool
    next_job: Optional[Job] = None
    reason: Optional[str] = None
    skills_met: bool
    experience_met: bool
    missing_skills: SkillMap = Field(default_factory=dict)
    months_remaining: int = 0


class TransitionResult(BaseModel):
    ok: bool
    error: Optional[ErrorKind] = None
    reason: Optional[str] = None
    challenge: Optional[Challenge] = None
    months_remaining: Optional[int] = None
    skill: Optional[SkillName] = None
    amount: Optional[int] = None
    job: Optional[Job] = None


class CareerEvent(BaseModel):
    timestamp: datetime
    character_id: str
    event_type: EventType
    game_date: datetime
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)


class CharacterState(BaseModel):
    character_id: str
    name: str
    skills: SkillSet = Field(default_factory=SkillSet)
    job: Optional[Job] = None
    job_history: list[Job] = Field(default_factory=list)
    challenges: list[Challenge] = Field(default_factory=list)
    game_date: datetime
    month_anchor: datetime
    months_elapsed: int = 0
