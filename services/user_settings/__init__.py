"""Per-user preferences and profile details."""

from .profile_service import DEFAULT_PROFILE, ProfileService
from .settings_service import DEFAULT_SETTINGS, SettingsService

__all__ = ["SettingsService", "DEFAULT_SETTINGS", "ProfileService", "DEFAULT_PROFILE"]
