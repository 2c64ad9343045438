from __future__ import annotations

from typing import Any, Union

from lifesim.models import CharacterState, Job, SkillName


def apply_skill_increment(state: CharacterState, skill: Union[SkillName, str], amount: int) -> dict[str, Any]:
    skill = SkillName(skill)
    amount = int(amount)
    if amount < 0:
        raise ValueError("skill increments cannot be negative")
    new_value = state.skills.level(skill) + amount
    setattr(state.skills, skill.value, new_value)
    return {"skills": {skill.value: new_value}, "increment": {"skill": skill.value, "amount": amount}}


def replace_job(state: CharacterState, job: Job) -> dict[str, Any]:
    previous = state.job
    state.job = job
    state.job_history.append(job.model_copy())
    return {
        "job": job.model_dump(mode="json"),
        "previous_job_id": previous.id if previous is not None else None,
    }


def add_months_in_position(state: CharacterState, months: int) -> dict[str, Any]:
    if state.job is None:
        raise KeyError(f"Character {state.character_id} has no job")
    state.job.months_in_position += int(months)
    return {"job": {"months_in_position": state.job.months_in_position}}
