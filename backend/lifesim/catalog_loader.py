from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import yaml

from lifesim.catalog import CareerCatalog
from lifesim.models import Profession

BUNDLED_CATALOG = Path(__file__).resolve().parent / "data" / "careers.yaml"


def load_professions(path: Union[str, Path]) -> list[Profession]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict) or not isinstance(data.get("professions"), list):
        raise ValueError(f"{path}: catalog must be a mapping with a 'professions' list")
    return [Profession(**item) for item in data["professions"]]


def load_catalog(path: Optional[Union[str, Path]] = None) -> CareerCatalog:
    return CareerCatalog(load_professions(path or BUNDLED_CATALOG))
