"""Plugin facade binding the hooks to their collaborators.

The hosting platform creates one :class:`VideoConverterPlugin` per process and
calls its hook methods from its own request threads. Each call takes exactly
one configuration snapshot and uses it for the whole invocation.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union

from .config import AppSettings, ConfigurationStore, PluginConfiguration
from .hooks.preview import AnimatedPreviewProfile, PreviewProfile, get_profile, message_has_been_posted
from .hooks.upload import file_will_be_uploaded
from .platform.api import MattermostAPI, PluginAPI
from .platform.schemas import FileInfo, Post
from .transcoder import Transcoder

logger = logging.getLogger(__name__)


class VideoConverterPlugin:
    """Implements the two hooks the platform exposes to plugins."""

    def __init__(
        self,
        api: PluginAPI,
        store: Optional[ConfigurationStore] = None,
        transcoder: Optional[Transcoder] = None,
        profile: Optional[PreviewProfile] = None,
        scratch_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        self.api = api
        self.store = store or ConfigurationStore()
        self.transcoder = transcoder or Transcoder()
        self.profile = profile or AnimatedPreviewProfile()
        self.scratch_dir = scratch_dir

    @classmethod
    def from_settings(cls, settings: AppSettings, api: Optional[PluginAPI] = None) -> "VideoConverterPlugin":
        """Build a plugin from the loaded YAML settings."""
        if api is None:
            api = MattermostAPI(
                base_url=settings.mattermost.url,
                token=settings.secrets.mattermost.token,
                timeout=settings.mattermost.timeout_seconds,
            )
        plugin = cls(
            api=api,
            store=ConfigurationStore(settings.plugin),
            transcoder=Transcoder(settings.transcoder.binary),
            profile=get_profile(settings.preview.profile),
            scratch_dir=settings.transcoder.scratch_dir,
        )
        logger.info(
            "Video converter ready (profile=%s, transcoder=%s)",
            plugin.profile.name,
            plugin.transcoder.binary,
        )
        return plugin

    def on_configuration_change(self, raw: Dict[str, Any]) -> PluginConfiguration:
        """Replace the configuration wholesale with *raw*.

        Raises:
            pydantic.ValidationError: If a value cannot be coerced.
        """
        configuration = PluginConfiguration.model_validate(raw)
        self.store.replace(configuration)
        return configuration

    def file_will_be_uploaded(
        self,
        context: Any,
        info: Optional[FileInfo],
        file: BinaryIO,
        output: BinaryIO,
    ) -> Tuple[Optional[FileInfo], str]:
        """Pre-commit hook. See :func:`videoconv.hooks.upload.file_will_be_uploaded`."""
        return file_will_be_uploaded(
            info,
            file,
            output,
            configuration=self.store.snapshot(),
            transcoder=self.transcoder,
            scratch_dir=self.scratch_dir,
        )

    def message_has_been_posted(self, context: Any, post: Post) -> None:
        """Post-commit hook. See :func:`videoconv.hooks.preview.message_has_been_posted`."""
        message_has_been_posted(
            self.api,
            post,
            configuration=self.store.snapshot(),
            transcoder=self.transcoder,
            profile=self.profile,
            scratch_dir=self.scratch_dir,
        )
