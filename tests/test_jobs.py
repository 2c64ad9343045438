import pytest

from lifesim.catalog import CareerCatalog
from lifesim.constants import DEFAULT_COMPANY
from lifesim.errors import NotFoundError
from lifesim.jobs import (
    JobFactory,
    cap_skill_gains,
    compute_stress,
    derive_skill_gains,
    meets_skill_requirements,
)
from lifesim.models import CareerPath, JobLevel, ProfessionCategory, SkillName, SkillSet


def test_stress_within_bounds_for_every_rung(catalog: CareerCatalog) -> None:
    for profession in catalog.professions():
        for rung in profession.career_path:
            assert 5 <= compute_stress(rung) <= 100


def test_stress_formula() -> None:
    rung = CareerPath(
        level=JobLevel.junior,
        title="t",
        salary=1,
        description="",
        skill_requirements={SkillName.technical: 550, SkillName.intelligence: 600},
        time_commitment=45,
    )
    # 20 + 5/2 + 1150/30
    assert compute_stress(rung) == pytest.approx(20 + 2.5 + 1150 / 30)


def test_stress_clamped() -> None:
    low = CareerPath(level=JobLevel.entry, title="t", salary=1, description="", time_commitment=10)
    high = CareerPath(
        level=JobLevel.executive,
        title="t",
        salary=1,
        description="",
        skill_requirements={SkillName.leadership: 3000},
        time_commitment=80,
    )
    assert compute_stress(low) == 5
    assert compute_stress(high) == 100


def test_derived_gains_from_requirements() -> None:
    rung = CareerPath(
        level=JobLevel.entry,
        title="t",
        salary=1,
        description="",
        skill_requirements={SkillName.charisma: 5, SkillName.technical: 137},
    )
    assert derive_skill_gains(rung) == {SkillName.charisma: 1, SkillName.technical: 13}


def test_explicit_gains_win() -> None:
    rung = CareerPath(
        level=JobLevel.entry,
        title="t",
        salary=1,
        description="",
        skill_requirements={SkillName.technical: 500},
        skill_gains={SkillName.creativity: 3},
    )
    assert derive_skill_gains(rung) == {SkillName.creativity: 3}


def test_gains_capped() -> None:
    assert cap_skill_gains({SkillName.technical: 80, SkillName.charisma: 4}) == {
        SkillName.technical: 25,
        SkillName.charisma: 4,
    }


def test_job_gains_capped_for_every_rung(catalog: CareerCatalog, factory: JobFactory) -> None:
    for profession in catalog.professions():
        for rung in profession.career_path:
            job = factory.instantiate(profession.id, rung)
            assert all(value <= 25 for value in job.skill_gains.values())


def test_instantiate_entry_job(catalog: CareerCatalog, factory: JobFactory) -> None:
    rung = catalog.get_rung("software-engineer", JobLevel.entry)
    job = factory.instantiate("software-engineer", rung)
    assert job.id == "software-engineer-entry"
    assert job.title == "Junior Developer"
    assert job.company == DEFAULT_COMPANY
    assert job.months_in_position == 0
    assert job.experience_required == 0
    assert job.job_level == JobLevel.entry
    assert job.skill_gains == {SkillName.technical: 20, SkillName.intelligence: 10}


def test_instantiate_uses_explicit_company(factory: JobFactory) -> None:
    job = factory.instantiate_level("software-engineer", "junior", company="Initech")
    assert job.company == "Initech"
    assert job.experience_required == 18


def test_company_provider(catalog: CareerCatalog) -> None:
    calls = []

    def provider(category: ProfessionCategory) -> str:
        calls.append(category)
        return "Hooli"

    factory = JobFactory(catalog, company_provider=provider)
    job = factory.instantiate_level("software-engineer")
    assert job.company == "Hooli"
    assert calls == [ProfessionCategory.technology]


def test_company_provider_empty_falls_back(catalog: CareerCatalog) -> None:
    factory = JobFactory(catalog, company_provider=lambda category: None)
    assert factory.instantiate_level("teacher").company == DEFAULT_COMPANY


def test_instantiate_unknown_profession(catalog: CareerCatalog, factory: JobFactory) -> None:
    rung = catalog.get_rung("software-engineer", JobLevel.entry)
    with pytest.raises(NotFoundError):
        factory.instantiate("astronaut", rung)


def test_entry_level_jobs(catalog: CareerCatalog, factory: JobFactory) -> None:
    jobs = factory.entry_level_jobs()
    assert len(jobs) == len(catalog)
    assert all(job.job_level == JobLevel.entry for job in jobs)


def test_jobs_available_for_skills(factory: JobFactory) -> None:
    assert all(not job.skill_requirements for job in factory.jobs_available_for_skills(SkillSet()))
    skills = SkillSet(technical=300, intelligence=350)
    ids = {job.id for job in factory.jobs_available_for_skills(skills)}
    assert "software-engineer-entry" in ids
    assert "software-engineer-junior" not in ids


def test_meets_skill_requirements() -> None:
    skills = SkillSet(technical=10)
    assert meets_skill_requirements(skills, {SkillName.technical: 10})
    assert not meets_skill_requirements(skills, {SkillName.technical: 10, SkillName.charisma: 1})
    assert meets_skill_requirements(skills, {})


def test_career_overview(factory: JobFactory) -> None:
    overview = factory.career_overview("software-engineer", "mid")
    assert overview["current"].title == "Senior Engineer"
    assert overview["next"].level == JobLevel.senior
    assert overview["rung_index"] == 2
    assert len(overview["career_path"]) == 5
