from __future__ import annotations

import logging

import uvicorn

from tasktrack.api.app import create_app
from tasktrack.config import SETTINGS
from tasktrack.infra.db import init_db
from tasktrack.infra.logging import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    try:
        init_db()
    except Exception:
        logger.exception("Database is not reachable")
        raise SystemExit(1)

    uvicorn.run(create_app(), host=SETTINGS.api_host, port=SETTINGS.api_port, log_config=None)


if __name__ == "__main__":
    main()
