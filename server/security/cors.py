"""CORS (Cross-Origin Resource Sharing) configuration for the command library API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def get_cors_config(allowed_origins: Optional[List[str]] = None) -> dict:
    """CORS settings for a read-only API.

    With no explicit origins any origin is accepted. Credentials are never
    allowed since there is nothing to authenticate.
    """
    origins = [origin for origin in (allowed_origins or []) if origin]

    return {
        "allow_origins": origins or ["*"],
        "allow_credentials": False,
        "allow_methods": ["GET", "HEAD", "OPTIONS"],
        "allow_headers": ["*"],
        "expose_headers": ["X-Response-Time"],
        "max_age": 600
    }


def setup_cors(app: FastAPI, enabled: bool, allowed_origins: Optional[List[str]] = None) -> None:
    """Install the CORS middleware when enabled; otherwise browsers get same-origin only."""
    if not enabled:
        logger.info("CORS disabled")
        return

    config = get_cors_config(allowed_origins)
    wildcard_subdomains = [o for o in config["allow_origins"] if o.startswith("*.")]
    if wildcard_subdomains:
        # CORSMiddleware has no glob support; express them as a regex instead
        patterns = [r"https?://([a-z0-9-]+\.)+" + o[2:].replace(".", r"\.") for o in wildcard_subdomains]
        config["allow_origin_regex"] = "|".join(patterns)
        config["allow_origins"] = [o for o in config["allow_origins"] if not o.startswith("*.")]

    app.add_middleware(CORSMiddleware, **config)
    logger.info(f"CORS enabled with origins: {config['allow_origins'] or wildcard_subdomains}")
