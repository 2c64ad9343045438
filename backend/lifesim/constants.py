from __future__ import annotations

from lifesim.models import ChallengeDifficulty, JobLevel, ProfessionCategory, SkillName

LEVEL_ORDER: tuple[JobLevel, ...] = (
    JobLevel.entry,
    JobLevel.junior,
    JobLevel.mid,
    JobLevel.senior,
    JobLevel.executive,
)

BASE_STRESS_BY_LEVEL = {
    JobLevel.entry: 10,
    JobLevel.junior: 20,
    JobLevel.mid: 35,
    JobLevel.senior: 50,
    JobLevel.executive: 70,
}

BASELINE_WEEKLY_HOURS = 40
MIN_STRESS = 5
MAX_STRESS = 100
SKILL_GAIN_CAP = 25

DEFAULT_COMPANY = "Generic Company"

DAYS_PER_MONTH = 30

# (xp_reward, completion_time in months)
CHALLENGE_TIERS = {
    ChallengeDifficulty.easy: (1, 2),
    ChallengeDifficulty.medium: (2, 5),
    ChallengeDifficulty.hard: (4, 10),
}
PROMOTION_CHALLENGE_TIER = (3, 7)
HARD_CHALLENGE_MIN_LEVEL = 5

REASON_TOP_OF_LADDER = "highest level reached"
REASON_NEEDS_BOTH = "needs experience and skills"
REASON_NEEDS_EXPERIENCE = "needs more experience"
REASON_NEEDS_SKILLS = "needs to develop skills further"
REASON_PROMOTION_ONLY = "this level is only reached through promotion"

CATEGORY_LABELS = {
    ProfessionCategory.technology: "Technology",
    ProfessionCategory.finance: "Finance",
    ProfessionCategory.healthcare: "Healthcare",
    ProfessionCategory.education: "Education",
    ProfessionCategory.creative: "Creative Arts",
    ProfessionCategory.business: "Business",
    ProfessionCategory.legal: "Legal",
    ProfessionCategory.science: "Science & Research",
    ProfessionCategory.government: "Government",
    ProfessionCategory.trade: "Skilled Trades",
}

SKILL_LABELS = {
    SkillName.intelligence: "Intelligence",
    SkillName.creativity: "Creativity",
    SkillName.charisma: "Charisma",
    SkillName.technical: "Technical",
    SkillName.leadership: "Leadership",
    SkillName.physical: "Physical",
}

CHALLENGE_TEMPLATES = {
    ChallengeDifficulty.easy: (
        "{skill} Basics",
        "Put in steady practice on the job to sharpen your {skill_lower} skills.",
    ),
    ChallengeDifficulty.medium: (
        "{skill} Workshop",
        "Take on a structured {skill_lower} program alongside your work as {title}.",
    ),
    ChallengeDifficulty.hard: (
        "{skill} Mastery Project",
        "Lead a demanding project that pushes your {skill_lower} well beyond the day-to-day.",
    ),
}
PROMOTION_CHALLENGE_TEMPLATE = (
    "Prepare for {next_title}",
    "Build the {skill_lower} expected of a {next_title} before your next review.",
)
