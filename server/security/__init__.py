"""Security package for the command library API."""

from .cors import (
    setup_cors,
    get_cors_config
)

__all__ = [
    "setup_cors",
    "get_cors_config"
]
