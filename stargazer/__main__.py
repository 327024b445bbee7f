"""
Stargazer Backend — Process Entrypoint
=======================================

Runs the API under uvicorn:

    python -m stargazer
    stargazer                # console script installed by pyproject.toml

Host, port and log level come from settings (BACKEND_HOST, BACKEND_PORT,
LOG_LEVEL). The database is opened and closed by the application lifespan.
"""

import uvicorn

from stargazer.config import settings


def main() -> None:
    uvicorn.run(
        "stargazer.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
