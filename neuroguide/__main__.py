"""Run the API server: ``python -m neuroguide`` (or the ``neuroguide`` script)."""

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "neuroguide.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.environment == "development" and not settings.testing,
    )


if __name__ == "__main__":
    main()
