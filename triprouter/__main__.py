"""Serve the trip router API: ``python -m triprouter``."""

from __future__ import annotations

import uvicorn

from .api import create_app
from .config import get_config
from .logging_config import configure_logging


def main() -> None:
    config = get_config()
    configure_logging(config.observability)
    uvicorn.run(
        create_app(),
        host=config.server.host,
        port=config.server.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
