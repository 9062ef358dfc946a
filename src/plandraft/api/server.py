"""
ASGI Entry Point for the plandraft API.

This module exposes the `app` object required by ASGI servers (Uvicorn/Gunicorn).
It loads `.env` first so that ``PLANDRAFT_*`` settings are visible before the
application factory reads them.

Usage
-----
Run via the module entry point:
    $ python -m plandraft.api.server

Or via uvicorn directly:
    $ uvicorn plandraft.api.server:app --reload
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from plandraft.api.app import create_app
from plandraft.core.settings import get_logger, load_settings

# Load environment variables from .env BEFORE the factory runs, so the
# repository singleton sees the configured store backend.
env_path = Path(".env")
load_dotenv(dotenv_path=env_path)

# Factory invocation
app = create_app()


def main() -> None:
    """Run the API server locally for development."""
    config = load_settings()
    logger = get_logger(__name__)
    logger.info(
        "Serving plans from %s backend (env=%s)", config.store_backend, config.environment
    )

    uvicorn.run(
        "plandraft.api.server:app",
        host="0.0.0.0",
        port=8000,
        reload=config.is_dev,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
