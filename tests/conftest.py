import sys
from datetime import datetime
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from lifesim.catalog import CareerCatalog  # noqa: E402
from lifesim.catalog_loader import load_catalog  # noqa: E402
from lifesim.challenges import ChallengeEngine  # noqa: E402
from lifesim.jobs import JobFactory  # noqa: E402
from lifesim.promotion import PromotionEvaluator  # noqa: E402


@pytest.fixture(scope="session")
def catalog() -> CareerCatalog:
    return load_catalog()


@pytest.fixture
def factory(catalog: CareerCatalog) -> JobFactory:
    return JobFactory(catalog)


@pytest.fixture
def evaluator(catalog: CareerCatalog, factory: JobFactory) -> PromotionEvaluator:
    return PromotionEvaluator(catalog, factory)


@pytest.fixture
def engine(catalog: CareerCatalog) -> ChallengeEngine:
    return ChallengeEngine(catalog)


@pytest.fixture
def day_zero() -> datetime:
    return datetime(2025, 1, 1)
