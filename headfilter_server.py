"""Reference filter backend server.

Mounts the reference filter router under a FastAPI application. When
``data/headfilter/filters.json`` exists it is loaded at startup so
discovery workers can query the configured filter set immediately.

Usage::

    # Development (auto-reload)
    uvicorn headfilter_server:app --reload --port 8430

    # Or run directly
    python headfilter_server.py
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from headfilter.src.config import FilterSetConfig
from headfilter.src.errors import ConfigurationError
from headfilter.src.server import install_filter_set, router

logger = logging.getLogger("headfilter")

DEFAULT_CONFIG_PATH = Path("data/headfilter/filters.json")

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Headfilter API",
    description=(
        "Decides whether branches, tags, and change requests found by a "
        "discovery pipeline are admitted for further processing."
    ),
    version="0.1.0",
)

_startup_status: dict[str, Any] = {"config_path": None, "loaded": False, "error": None}


def load_startup_config(path: Path = DEFAULT_CONFIG_PATH) -> bool:
    """Install the filter set stored at *path*, if the file exists.

    A malformed file is logged and left uninstalled; the server still
    starts so the configuration can be replaced through the API.

    Args:
        path: JSON configuration file.

    Returns:
        True when a filter set was installed.
    """
    _startup_status["config_path"] = str(path)
    if not path.is_file():
        logger.info("No filter configuration at %s", path)
        return False
    try:
        install_filter_set(FilterSetConfig.load(path))
    except ConfigurationError as exc:
        _startup_status["error"] = str(exc)
        logger.warning("Filter configuration %s rejected: %s", path, exc)
        return False
    _startup_status["loaded"] = True
    return True


app.include_router(router, prefix="/api/headfilter", tags=["headfilter"])


@app.get("/api/health")
async def unified_health() -> dict[str, Any]:
    """Return server health and the startup configuration status."""
    return {
        "status": "ok" if _startup_status["error"] is None else "degraded",
        "version": "0.1.0",
        "startup_config": _startup_status,
    }


load_startup_config()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Start the server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8430.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()
