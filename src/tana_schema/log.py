from __future__ import annotations

import logging

from tana_schema.settings import get_settings


def configure_logging(level: str | None = None) -> None:
    level = (level or get_settings().log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
