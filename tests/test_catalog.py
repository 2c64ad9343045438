from pathlib import Path

import pytest

from lifesim.catalog import CareerCatalog
from lifesim.catalog_loader import BUNDLED_CATALOG, load_catalog, load_professions
from lifesim.catalog_validation import validate_catalog, validate_profession
from lifesim.constants import LEVEL_ORDER
from lifesim.errors import CatalogError, NotFoundError
from lifesim.models import CareerPath, JobLevel, Profession, ProfessionCategory


def _ladder(**overrides) -> list[CareerPath]:
    rungs = []
    for index, level in enumerate(LEVEL_ORDER):
        data = {
            "level": level,
            "title": f"Rung {index}",
            "salary": 1000 * (index + 1),
            "description": "",
            "experience": 0 if index == 0 else 12,
        }
        data.update(overrides.get(level.value, {}))
        rungs.append(CareerPath(**data))
    return rungs


def _profession(pid: str = "tester", category: str = "technology", **overrides) -> Profession:
    return Profession(
        id=pid,
        name=pid.title(),
        category=category,
        description="",
        career_path=_ladder(**overrides),
    )


def test_bundled_catalog_loads(catalog: CareerCatalog) -> None:
    assert len(catalog) >= 10
    assert "software-engineer" in catalog
    for profession in catalog.professions():
        assert tuple(r.level for r in profession.career_path) == LEVEL_ORDER


def test_bundled_catalog_has_unique_ids() -> None:
    ids = [p.id for p in load_professions(BUNDLED_CATALOG)]
    assert len(ids) == len(set(ids))
    assert ids.count("data-scientist") == 1
    assert ids.count("product-manager") == 1


def test_get_profession_unknown_names_id(catalog: CareerCatalog) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        catalog.get_profession("astronaut")
    assert "astronaut" in str(excinfo.value)
    assert excinfo.value.missing_id == "astronaut"


def test_get_rung(catalog: CareerCatalog) -> None:
    rung = catalog.get_rung("software-engineer", JobLevel.junior)
    assert rung.title == "Software Engineer"
    assert rung.experience == 18
    assert catalog.get_rung("software-engineer", "junior") == rung


def test_get_rung_unknown_level(catalog: CareerCatalog) -> None:
    with pytest.raises(NotFoundError):
        catalog.get_rung("software-engineer", "intern")


def test_get_next_rung_follows_ladder(catalog: CareerCatalog) -> None:
    for profession in catalog.professions():
        for index, level in enumerate(LEVEL_ORDER):
            next_rung = catalog.get_next_rung(profession.id, level)
            if level == JobLevel.executive:
                assert next_rung is None
            else:
                assert next_rung.level == LEVEL_ORDER[index + 1]


def test_get_next_rung_invalid_level(catalog: CareerCatalog) -> None:
    assert catalog.get_next_rung("software-engineer", "intern") is None


def test_list_by_category(catalog: CareerCatalog) -> None:
    tech = catalog.list_by_category(ProfessionCategory.technology)
    assert {p.id for p in tech} >= {"software-engineer", "data-scientist"}
    assert all(p.category == ProfessionCategory.technology for p in tech)
    assert catalog.list_by_category("technology") == tech


def test_categories_and_labels(catalog: CareerCatalog) -> None:
    categories = catalog.categories()
    assert ProfessionCategory.technology in categories
    assert categories == [c for c in ProfessionCategory if c in categories]
    assert CareerCatalog.category_label("creative") == "Creative Arts"


def test_duplicate_ids_rejected() -> None:
    with pytest.raises(CatalogError) as excinfo:
        CareerCatalog([_profession("dup"), _profession("dup", category="business")])
    assert any("dup" in error for error in excinfo.value.errors)


def test_validate_profession_rung_order() -> None:
    rungs = _ladder()
    rungs[1], rungs[2] = rungs[2], rungs[1]
    profession = Profession(id="bad", name="Bad", category="trade", description="", career_path=rungs)
    errors = validate_profession(profession)
    assert any("rungs must run" in error for error in errors)


def test_validate_profession_missing_rung() -> None:
    profession = Profession(
        id="short", name="Short", category="trade", description="", career_path=_ladder()[:4]
    )
    assert validate_profession(profession) == ["short: career path must have 5 rungs, found 4"]


def test_validate_profession_values() -> None:
    profession = _profession(
        "odd",
        entry={"experience": 3},
        junior={"salary": 0, "skill_requirements": {"technical": -1}},
    )
    errors = validate_profession(profession)
    assert "odd/entry: entry rung must require 0 months of experience" in errors
    assert "odd/junior: salary must be positive" in errors
    assert "odd/junior: requirement for technical cannot be negative" in errors


def test_validate_catalog_clean() -> None:
    assert validate_catalog([_profession("a"), _profession("b")]) == []


def test_load_catalog_from_custom_file(tmp_path: Path) -> None:
    path = tmp_path / "careers.yaml"
    path.write_text(
        """
professions:
  - id: baker
    name: Baker
    category: trade
    description: Bakes bread.
    career_path:
      - {level: entry, title: Apprentice, salary: 20000, description: "", experience: 0}
      - {level: junior, title: Baker, salary: 30000, description: "", experience: 6}
      - {level: mid, title: Head Baker, salary: 40000, description: "", experience: 12}
      - {level: senior, title: Pastry Chef, salary: 50000, description: "", experience: 24}
      - {level: executive, title: Owner, salary: 90000, description: "", experience: 36}
""",
        encoding="utf-8",
    )
    catalog = load_catalog(path)
    assert len(catalog) == 1
    assert catalog.get_rung("baker", "executive").title == "Owner"


def test_load_catalog_rejects_wrong_shape(tmp_path: Path) -> None:
    path = tmp_path / "careers.yaml"
    path.write_text("- just a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_catalog(path)
