"""Entry point for the barber API.

Host, port and log level come from the same settings object the
application uses (``HOST``, ``PORT`` and ``LOG_LEVEL`` in the environment
or ``.env``).

Usage:
    python run.py
"""
import uvicorn

from barber_api.config import settings


def main() -> None:
    uvicorn.run(
        "barber_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
