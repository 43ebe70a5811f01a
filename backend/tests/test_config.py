"""Tests for settings loading and the hot-reloadable plugin configuration."""
import threading

import pytest
from pydantic import ValidationError

from videoconv.config import (
    AppSettings,
    ConfigurationStore,
    PluginConfiguration,
    load_settings,
)


class TestPluginConfiguration:
    """Test PluginConfiguration parsing."""

    def test_defaults_disable_everything(self):
        cfg = PluginConfiguration()
        assert cfg.convert_mov_to_mp4 is False
        assert cfg.create_preview_image is False
        assert cfg.conversion_file_size_limit == 0

    def test_accepts_platform_keys(self):
        cfg = PluginConfiguration.model_validate({
            "ConvertMOVToMP4": True,
            "CreatePreviewImage": True,
            "ConversionFileSizeLimit": 1024,
        })
        assert cfg.convert_mov_to_mp4 is True
        assert cfg.create_preview_image is True
        assert cfg.conversion_file_size_limit == 1024

    def test_accepts_field_names(self):
        cfg = PluginConfiguration(convert_mov_to_mp4=True)
        assert cfg.convert_mov_to_mp4 is True

    def test_coerces_strings(self):
        cfg = PluginConfiguration.model_validate({
            "ConvertMOVToMP4": "true",
            "ConversionFileSizeLimit": "2048",
        })
        assert cfg.convert_mov_to_mp4 is True
        assert cfg.conversion_file_size_limit == 2048

    def test_rejects_uncoercible_values(self):
        with pytest.raises(ValidationError):
            PluginConfiguration.model_validate({"ConversionFileSizeLimit": "lots"})

    def test_is_immutable(self):
        cfg = PluginConfiguration()
        with pytest.raises(ValidationError):
            cfg.convert_mov_to_mp4 = True

    def test_dump_by_alias(self):
        dumped = PluginConfiguration(create_preview_image=True).model_dump(by_alias=True)
        assert dumped == {
            "ConvertMOVToMP4": False,
            "CreatePreviewImage": True,
            "ConversionFileSizeLimit": 0,
        }


class TestSizeLimit:
    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_means_no_limit(self, limit):
        cfg = PluginConfiguration(conversion_file_size_limit=limit)
        assert cfg.exceeds_size_limit(10 ** 12) is False

    def test_size_equal_to_limit_is_allowed(self):
        cfg = PluginConfiguration(conversion_file_size_limit=100)
        assert cfg.exceeds_size_limit(100) is False

    def test_size_over_limit(self):
        cfg = PluginConfiguration(conversion_file_size_limit=100)
        assert cfg.exceeds_size_limit(101) is True


class TestConfigurationStore:
    """Test snapshot/replace semantics."""

    def test_default_snapshot(self):
        assert ConfigurationStore().snapshot() == PluginConfiguration()

    def test_replace_installs_new_value(self):
        store = ConfigurationStore()
        new = PluginConfiguration(convert_mov_to_mp4=True)
        store.replace(new)
        assert store.snapshot() is new

    def test_snapshot_is_unaffected_by_later_replace(self):
        store = ConfigurationStore(PluginConfiguration(convert_mov_to_mp4=True))
        snapshot = store.snapshot()
        store.replace(PluginConfiguration(convert_mov_to_mp4=False))
        assert snapshot.convert_mov_to_mp4 is True

    def test_concurrent_replace_never_tears(self):
        store = ConfigurationStore()
        enabled = PluginConfiguration(convert_mov_to_mp4=True, create_preview_image=True)
        disabled = PluginConfiguration()
        seen = []

        def writer():
            for i in range(500):
                store.replace(enabled if i % 2 else disabled)

        def reader():
            for _ in range(500):
                cfg = store.snapshot()
                seen.append((cfg.convert_mov_to_mp4, cfg.create_preview_image))

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert set(seen) <= {(True, True), (False, False)}


class TestLoadSettings:
    """Test YAML loading."""

    def test_missing_files_fall_back_to_defaults(self, tmp_path):
        settings = load_settings(
            settings_path=tmp_path / "missing.settings.yaml",
            secrets_path=tmp_path / "missing.secrets.yaml",
        )
        assert settings == AppSettings()
        assert settings.preview.profile == "animated"
        assert settings.transcoder.binary == "ffmpeg"

    def test_loads_settings_and_secrets(self, tmp_path):
        settings_file = tmp_path / "videoconv.settings.yaml"
        settings_file.write_text(
            "server:\n"
            "  port: 9000\n"
            "transcoder:\n"
            "  binary: /usr/local/bin/ffmpeg\n"
            "  scratch_dir: /var/tmp/videoconv\n"
            "preview:\n"
            "  profile: still\n"
            "plugin:\n"
            "  ConvertMOVToMP4: true\n"
            "  ConversionFileSizeLimit: 52428800\n"
            "mattermost:\n"
            "  url: https://chat.example.com\n",
            encoding="utf-8",
        )
        secrets_file = tmp_path / "videoconv.secrets.yaml"
        secrets_file.write_text("mattermost:\n  token: bot-token\n", encoding="utf-8")

        settings = load_settings(settings_path=settings_file, secrets_path=secrets_file)

        assert settings.server.port == 9000
        assert settings.transcoder.binary == "/usr/local/bin/ffmpeg"
        assert settings.transcoder.scratch_dir == "/var/tmp/videoconv"
        assert settings.preview.profile == "still"
        assert settings.plugin.convert_mov_to_mp4 is True
        assert settings.plugin.create_preview_image is False
        assert settings.plugin.conversion_file_size_limit == 52428800
        assert settings.mattermost.url == "https://chat.example.com"
        assert settings.secrets.mattermost.token == "bot-token"

    def test_empty_file_uses_defaults(self, tmp_path):
        settings_file = tmp_path / "videoconv.settings.yaml"
        settings_file.write_text("", encoding="utf-8")
        settings = load_settings(settings_path=settings_file, secrets_path=tmp_path / "none.yaml")
        assert settings.server.port == 8065

    def test_unknown_profile_is_rejected(self, tmp_path):
        settings_file = tmp_path / "videoconv.settings.yaml"
        settings_file.write_text("preview:\n  profile: mosaic\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_settings(settings_path=settings_file, secrets_path=tmp_path / "none.yaml")
