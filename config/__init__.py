"""Configuration module for the command library API."""

from .settings import AppConfig, DEFAULT_POPULAR_COMMANDS

__all__ = [
    'AppConfig',
    'DEFAULT_POPULAR_COMMANDS'
]
