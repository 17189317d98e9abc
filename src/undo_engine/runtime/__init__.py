"""Runtime services: settings and telelog-backed telemetry."""

from .config import RuntimeSettings, current_settings, load_settings, use_settings

__all__ = ["RuntimeSettings", "current_settings", "load_settings", "use_settings"]
