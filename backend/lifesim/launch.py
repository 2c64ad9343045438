from __future__ import annotations

import logging
import os
from pathlib import Path

import uvicorn

from lifesim.config import load_config

BACKEND_DIR = Path(__file__).resolve().parents[1]


def main() -> None:
    config = load_config(BACKEND_DIR / "config.yaml")
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("LIFESIM_HOST", "0.0.0.0")
    port = int(os.environ.get("LIFESIM_PORT", "8000"))
    uvicorn.run("lifesim.main:app", host=host, port=port, reload=False, app_dir=str(BACKEND_DIR))


if __name__ == "__main__":
    main()
