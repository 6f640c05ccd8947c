"""Core app configuration, database and error types."""

from notevault.core.config import get_settings, settings
from notevault.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
