"""Configuration management for coursemedia.

Supports YAML profiles, upload/playback tuning sections and environment
variable overrides. Secrets (API key, access token) are read from the
environment only and never written to disk.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from coursemedia.core.exceptions import ConfigurationError, ProfileNotFoundError
from coursemedia.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_STORAGE_TIMEOUT_SECONDS
from coursemedia.core.validation import validate_percent
from coursemedia.uploaders.constants import (
    ALLOWED_VIDEO_TYPES,
    DEFAULT_BUCKET,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DIRECT_THRESHOLD,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_UPLOAD_WORKERS,
    UPLOAD_PRESETS,
)

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "coursemedia"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "COURSEMEDIA_URL"
ENV_APP_URL = "COURSEMEDIA_APP_URL"
ENV_API_KEY = "COURSEMEDIA_API_KEY"
ENV_TOKEN = "COURSEMEDIA_TOKEN"
ENV_PROFILE = "COURSEMEDIA_PROFILE"
ENV_VERIFY_SSL = "COURSEMEDIA_VERIFY_SSL"
ENV_TIMEOUT = "COURSEMEDIA_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Connection profile for a backend deployment."""

    url: str
    app_url: Optional[str] = None
    bucket: str = DEFAULT_BUCKET
    verify_ssl: bool = True
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    storage_timeout: int = DEFAULT_STORAGE_TIMEOUT_SECONDS

    @property
    def api_base_url(self) -> str:
        """Base URL of the LMS web app (progress endpoint)."""
        return self.app_url or self.url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "url": self.url,
            "bucket": self.bucket,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "storage_timeout": self.storage_timeout,
        }
        if self.app_url:
            data["app_url"] = self.app_url
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            app_url=data.get("app_url"),
            bucket=data.get("bucket", DEFAULT_BUCKET),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
            storage_timeout=data.get("storage_timeout", DEFAULT_STORAGE_TIMEOUT_SECONDS),
        )


# =============================================================================
# Tuning Sections
# =============================================================================


@dataclass
class UploadSettings:
    """Tunables for the upload engine."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    direct_threshold: int = DEFAULT_DIRECT_THRESHOLD
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    concurrency: int = DEFAULT_UPLOAD_WORKERS
    max_retries: int = DEFAULT_MAX_RETRIES
    allowed_mime_types: tuple[str, ...] = ALLOWED_VIDEO_TYPES

    @classmethod
    def preset(cls, name: str, **overrides: Any) -> "UploadSettings":
        """Build settings from a named preset (``standard`` or ``large``).

        Raises:
            ConfigurationError: If the preset is unknown.
        """
        if name not in UPLOAD_PRESETS:
            raise ConfigurationError(f"Unknown upload preset: {name}", field="preset", value=name)
        values: dict[str, Any] = dict(UPLOAD_PRESETS[name])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["allowed_mime_types"] = list(self.allowed_mime_types)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known - {"preset"}
        if unknown:
            raise ConfigurationError(
                f"Unknown upload settings: {', '.join(sorted(unknown))}", field="upload"
            )
        values = {k: v for k, v in data.items() if k in known}
        if "allowed_mime_types" in values:
            values["allowed_mime_types"] = tuple(values["allowed_mime_types"])
        if "preset" in data:
            return cls.preset(data["preset"], **values)
        return cls(**values)


@dataclass
class PlaybackSettings:
    """Tunables for playback progress tracking."""

    completion_threshold: int = 90
    report_interval: float = 15.0
    debounce_wait: float = 1.0
    skip_prevention: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlaybackSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown playback settings: {', '.join(sorted(unknown))}", field="playback"
            )
        values = dict(data)
        if "completion_threshold" in values:
            values["completion_threshold"] = validate_percent(
                values["completion_threshold"], "completion_threshold"
            )
        return cls(**values)


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)
    upload: UploadSettings = field(default_factory=UploadSettings)
    playback: PlaybackSettings = field(default_factory=PlaybackSettings)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in data.get("profiles", {}).items():
                    config.profiles[name] = Profile.from_dict(pdata)

                if data.get("upload"):
                    config.upload = UploadSettings.from_dict(data["upload"])
                if data.get("playback"):
                    config.playback = PlaybackSettings.from_dict(data["playback"])
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(f"Failed to load config: {e}")

        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_HTTP_TIMEOUT_SECONDS)))

            config.profiles["default"] = Profile(
                url=url,
                app_url=os.getenv(ENV_APP_URL),
                verify_ssl=verify_ssl,
                timeout=timeout,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file (excludes secrets).

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
            "upload": self.upload.to_dict(),
            "playback": self.playback.to_dict(),
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        app_url: Optional[str] = None,
        bucket: str = DEFAULT_BUCKET,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ) -> Profile:
        """Add or update a profile."""
        profile = Profile(
            url=url,
            app_url=app_url,
            bucket=bucket,
            verify_ssl=verify_ssl,
            timeout=timeout,
        )
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        """Remove a profile.

        Returns:
            True if removed, False if didn't exist.
        """
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_api_key() -> Optional[str]:
    """Get the backend API key from the environment."""
    return os.getenv(ENV_API_KEY)


def get_token() -> Optional[str]:
    """Get the user access token from the environment."""
    return os.getenv(ENV_TOKEN)
