"""Video converter configuration.

Loads settings from two YAML files:
  * videoconv.settings.yaml  — non-secret configuration
  * videoconv.secrets.yaml   — secrets (never committed)

The ``plugin`` section seeds the hot-reloadable :class:`PluginConfiguration`.
Everything else is read once at startup.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("videoconv.settings.yaml")
SECRETS_FILE  = Path("videoconv.secrets.yaml")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Hot-reloadable plugin configuration
# ---------------------------------------------------------------------------


class PluginConfiguration(BaseModel):
    """Toggles consulted by both hooks.

    Accepts the platform's CamelCase keys (``ConvertMOVToMP4``) as well as the
    snake_case field names. Instances are immutable; a reload installs a new
    instance rather than mutating the current one.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    convert_mov_to_mp4:         bool = Field(False, alias="ConvertMOVToMP4")
    create_preview_image:       bool = Field(False, alias="CreatePreviewImage")
    conversion_file_size_limit: int  = Field(0, alias="ConversionFileSizeLimit")

    def exceeds_size_limit(self, size: int) -> bool:
        """Return True if *size* is over the limit. A limit of 0 or less means no limit."""
        limit = self.conversion_file_size_limit
        return limit > 0 and size > limit


class ConfigurationStore:
    """Process-wide holder of the current :class:`PluginConfiguration`.

    Writers replace the value wholesale under a lock; readers take a snapshot
    once per hook invocation and keep using it even if a reload happens
    meanwhile.
    """

    def __init__(self, configuration: Optional[PluginConfiguration] = None) -> None:
        self._lock = threading.Lock()
        self._configuration = configuration or PluginConfiguration()

    def snapshot(self) -> PluginConfiguration:
        with self._lock:
            return self._configuration

    def replace(self, configuration: PluginConfiguration) -> None:
        with self._lock:
            self._configuration = configuration
        logger.info(
            "Configuration replaced (convert_mov_to_mp4=%s, create_preview_image=%s, "
            "conversion_file_size_limit=%s)",
            configuration.convert_mov_to_mp4,
            configuration.create_preview_image,
            configuration.conversion_file_size_limit,
        )


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class MattermostSecrets(BaseModel):
    token: Optional[str] = None


class Secrets(BaseModel):
    mattermost: MattermostSecrets = Field(default_factory=MattermostSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8065


class LoggingSettings(BaseModel):
    level: str = "info"


class TranscoderSettings(BaseModel):
    """Location of the ffmpeg binary and of the scratch directory."""
    binary:      str           = "ffmpeg"
    scratch_dir: Optional[str] = None


class PreviewSettings(BaseModel):
    """Preview profile used by the post-commit hook.

    ``animated`` posts a single looping GIF; ``still`` posts a thumbnail and a
    preview JPEG taken one second into the video.
    """
    profile: Literal["animated", "still"] = "animated"


class MattermostSettings(BaseModel):
    url:             str   = "http://localhost:8065"
    timeout_seconds: float = 30.0


class AppSettings(BaseModel):
    server:     ServerSettings      = Field(default_factory=ServerSettings)
    logging:    LoggingSettings     = Field(default_factory=LoggingSettings)
    transcoder: TranscoderSettings  = Field(default_factory=TranscoderSettings)
    preview:    PreviewSettings     = Field(default_factory=PreviewSettings)
    plugin:     PluginConfiguration = Field(default_factory=PluginConfiguration)
    mattermost: MattermostSettings  = Field(default_factory=MattermostSettings)
    secrets:    Secrets             = Field(default_factory=Secrets)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

_settings: Optional[AppSettings] = None


def load_settings(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> AppSettings:
    """Load and merge settings + secrets into a single *AppSettings* object."""
    settings_data = _load_yaml(Path(settings_path) if settings_path else SETTINGS_FILE)
    secrets_data  = _load_yaml(Path(secrets_path) if secrets_path else SECRETS_FILE)

    # Merge: secrets live under the "secrets" key in AppSettings
    settings_data["secrets"] = secrets_data

    app_settings = AppSettings(**settings_data)
    logger.info(
        "Settings loaded (server=%s:%s, transcoder=%s, preview.profile=%s)",
        app_settings.server.host,
        app_settings.server.port,
        app_settings.transcoder.binary,
        app_settings.preview.profile,
    )
    return app_settings


def get_settings() -> AppSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    global _settings
    _settings = None
