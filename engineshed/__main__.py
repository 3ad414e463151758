# engineshed/__main__.py
"""Serve the API with uvicorn: ``python -m engineshed`` or ``engineshed``."""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "engineshed.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
