from __future__ import annotations

import logging

import uvicorn

from .config import ConfigurationError, load_settings
from .logging_utils import setup_logging
from .main import create_app

logger = logging.getLogger("asaas_bridge")


def main() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        setup_logging()
        logger.critical("Refusing to start: %s", exc)
        raise SystemExit(1) from exc

    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
