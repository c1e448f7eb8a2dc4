"""Serve the API with uvicorn: python -m school_records"""

from __future__ import annotations

import uvicorn

from school_records.core.settings import get_app_settings


# PUBLIC_INTERFACE
def main() -> None:
    """Run the ASGI app on HOST:PORT from the environment."""
    settings = get_app_settings()
    uvicorn.run(
        "school_records.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
