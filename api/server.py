"""Process entry point: ``python -m api.server`` or the ``chat-service`` script."""
import logging
import sys

import uvicorn

from core.logging import configure_logging
from core.settings import SETTINGS

logger = logging.getLogger("chat.server")


def main() -> int:
    configure_logging(SETTINGS.APP)
    logger.info(f"Serving on {SETTINGS.APP.HOST}:{SETTINGS.APP.PORT} ({SETTINGS.APP.ENVIRONMENT})")
    try:
        # uvicorn exits non-zero by itself when lifespan startup fails.
        uvicorn.run(
            "api.main:app",
            host=SETTINGS.APP.HOST,
            port=SETTINGS.APP.PORT,
            log_config=None,
        )
    except Exception:
        logger.exception("Server terminated with an error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
