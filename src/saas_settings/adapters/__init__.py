"""Adapter implementations bridging store ports to infrastructure."""

from .sqlite import SettingsDatabase, SqliteCatalogStore, SqliteParameterStore, SqliteTierTable

__all__ = ["SettingsDatabase", "SqliteCatalogStore", "SqliteParameterStore", "SqliteTierTable"]
