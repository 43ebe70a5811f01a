"""The platform capabilities the hooks depend on.

:class:`PluginAPI` is the abstract surface (file metadata, file bytes, file
upload, post creation). :class:`MattermostAPI` implements it against the
Mattermost v4 REST API.

Usage:
    api = MattermostAPI(base_url="https://chat.example.com", token="...")
    info = api.get_file_info(file_id)
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import StorageError
from .schemas import FileInfo, Post

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class PluginAPI(ABC):
    """File storage and messaging operations offered by the platform.

    Every method raises :class:`StorageError` when the platform rejects the
    request.
    """

    @abstractmethod
    def get_file_info(self, file_id: str) -> Optional[FileInfo]:
        """Return the committed metadata of *file_id*, or None if it does not exist."""

    @abstractmethod
    def get_file(self, file_id: str) -> bytes:
        """Return the stored bytes of *file_id*."""

    @abstractmethod
    def upload_file(self, data: bytes, channel_id: str, filename: str) -> FileInfo:
        """Store *data* as a new file in *channel_id* and return its metadata."""

    @abstractmethod
    def create_post(self, post: Post) -> Post:
        """Create *post* and return it as stored."""


class MattermostAPI(PluginAPI):
    """:class:`PluginAPI` backed by the Mattermost REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(
            base_url=f"{self.base_url}/api/v4",
            headers=headers,
            timeout=timeout,
        )

    def close(self) -> None:
        self._client.close()

    def get_file_info(self, file_id: str) -> Optional[FileInfo]:
        resp = self._request("GET", f"/files/{file_id}/info", allow_missing=True)
        if resp is None:
            return None
        return _validate(FileInfo, _json(resp), resp)

    def get_file(self, file_id: str) -> bytes:
        return self._request("GET", f"/files/{file_id}").content

    def upload_file(self, data: bytes, channel_id: str, filename: str) -> FileInfo:
        resp = self._request(
            "POST",
            "/files",
            data={"channel_id": channel_id},
            files={"files": (filename, data)},
        )
        body = _json(resp)
        infos = body.get("file_infos") if isinstance(body, dict) else None
        if not isinstance(infos, list) or not infos:
            raise StorageError(f"upload of {filename} returned no file info")
        return _validate(FileInfo, infos[0], resp)

    def create_post(self, post: Post) -> Post:
        payload = post.model_dump(exclude={"id", "create_at"})
        resp = self._request("POST", "/posts", json=payload)
        return _validate(Post, _json(resp), resp)

    def _request(
        self,
        method: str,
        url: str,
        allow_missing: bool = False,
        **kwargs: Any,
    ) -> Optional[httpx.Response]:
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"{method} {url} failed: {exc}") from exc

        if allow_missing and resp.status_code == 404:
            logger.debug("%s %s returned 404", method, url)
            return None
        if resp.status_code >= 400:
            raise StorageError(
                f"{method} {url} failed with status {resp.status_code}: {_error_message(resp)}",
                status_code=resp.status_code,
            )
        return resp


def _error_message(resp: httpx.Response) -> str:
    """Extract the ``message`` field of a Mattermost AppError body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return resp.text


def _json(resp: httpx.Response) -> Any:
    """Decode a successful response body, raising StorageError if it is not JSON."""
    try:
        return resp.json()
    except ValueError as exc:
        raise StorageError(
            f"{_describe(resp)} returned a non-JSON body: {resp.text[:200]}",
            status_code=resp.status_code,
        ) from exc


def _validate(model: Type[ModelT], payload: Any, resp: httpx.Response) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise StorageError(
            f"{_describe(resp)} returned an invalid {model.__name__}: {exc}",
            status_code=resp.status_code,
        ) from exc


def _describe(resp: httpx.Response) -> str:
    return f"{resp.request.method} {resp.request.url.path}"
