"""DashQuery: query history and dashboard panel query validation."""

__version__ = "0.1.0"
