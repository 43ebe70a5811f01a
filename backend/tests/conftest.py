"""Shared test fixtures and configuration for backend tests."""
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Set
from unittest.mock import patch

import pytest

from videoconv.config import ConfigurationStore, PluginConfiguration
from videoconv.errors import StorageError
from videoconv.platform.api import PluginAPI
from videoconv.platform.schemas import FileInfo, Post
from videoconv.transcoder import Transcoder


class FakePluginAPI(PluginAPI):
    """Scripted stand-in for the platform API.

    Files are registered with :meth:`add_file`; uploads and posts are recorded
    so tests can assert on them.
    """

    def __init__(self) -> None:
        self.infos: Dict[str, FileInfo] = {}
        self.contents: Dict[str, bytes] = {}
        self.uploads: List[Dict] = []
        self.posts: List[Post] = []
        self.missing_bytes: Set[str] = set()
        self.failing_infos: Set[str] = set()
        self.fail_uploads = False
        self.fail_create_post = False

    def add_file(self, file_id: str, name: str, data: bytes = b"video-bytes") -> FileInfo:
        extension = name.rpartition(".")[2] if "." in name else ""
        info = FileInfo(id=file_id, name=name, extension=extension, size=len(data))
        self.infos[file_id] = info
        self.contents[file_id] = data
        return info

    def get_file_info(self, file_id: str) -> Optional[FileInfo]:
        if file_id in self.failing_infos:
            raise StorageError(f"info for {file_id} unavailable", status_code=500)
        return self.infos.get(file_id)

    def get_file(self, file_id: str) -> bytes:
        if file_id in self.missing_bytes or file_id not in self.contents:
            raise StorageError(f"file {file_id} not found", status_code=404)
        return self.contents[file_id]

    def upload_file(self, data: bytes, channel_id: str, filename: str) -> FileInfo:
        if self.fail_uploads:
            raise StorageError("upload rejected", status_code=413)
        info = FileInfo(
            id=f"upload-{len(self.uploads) + 1}",
            channel_id=channel_id,
            name=filename,
            extension=filename.rpartition(".")[2],
            size=len(data),
        )
        self.uploads.append({"data": data, "channel_id": channel_id, "filename": filename, "info": info})
        return info

    def create_post(self, post: Post) -> Post:
        if self.fail_create_post:
            raise StorageError("post rejected", status_code=403)
        created = post.model_copy(update={"id": f"post-{len(self.posts) + 1}"})
        self.posts.append(created)
        return created


class FakeFFmpeg:
    """Replacement for ``subprocess.run`` imitating ffmpeg.

    Writes ``<operation>:<input bytes>`` to the output path (the last
    argument) and exits 0, unless the input file's content is listed in
    :attr:`fail_inputs` or :attr:`fail_all` is set.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.fail_all = False
        self.fail_inputs: Set[bytes] = set()
        self.spawn_error: Optional[OSError] = None

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if self.spawn_error is not None:
            raise self.spawn_error

        source = Path(cmd[cmd.index("-i") + 1]).read_bytes()
        if self.fail_all or source in self.fail_inputs:
            return subprocess.CompletedProcess(cmd, 1, stdout=b"Invalid data found when processing input")

        Path(cmd[-1]).write_bytes(b"converted:" + source)
        return subprocess.CompletedProcess(cmd, 0, stdout=b"")


@pytest.fixture
def fake_api():
    """Provide an empty FakePluginAPI."""
    return FakePluginAPI()


@pytest.fixture
def fake_ffmpeg():
    """Patch subprocess.run in the transcoder with a FakeFFmpeg."""
    fake = FakeFFmpeg()
    with patch("videoconv.transcoder.invoker.subprocess.run", side_effect=fake):
        yield fake


@pytest.fixture
def transcoder():
    return Transcoder("ffmpeg")


@pytest.fixture
def scratch_dir(tmp_path):
    """Dedicated scratch directory so tests can check nothing is left behind."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def enabled_store():
    """ConfigurationStore with both hooks enabled and no size limit."""
    return ConfigurationStore(PluginConfiguration(
        convert_mov_to_mp4=True,
        create_preview_image=True,
    ))
