"""Hook router — lets the platform call the plugin hooks over HTTP.

Endpoints:
    POST /hooks/file-will-be-uploaded     — Pre-commit upload hook
    POST /hooks/message-has-been-posted   — Post-commit preview hook
    GET  /configuration                   — Current plugin configuration
    PUT  /configuration                   — Replace the plugin configuration

The hook endpoints are plain ``def`` functions so they run on FastAPI's
worker threads; a conversion blocks its request until ffmpeg exits.
"""
import io
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from ..config import PluginConfiguration
from ..platform.schemas import FileInfo, Post
from ..plugin import VideoConverterPlugin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hooks"])

FILE_INFO_HEADER = "X-File-Info"

# ---------------------------------------------------------------------------
# Singleton plugin management
# ---------------------------------------------------------------------------

_plugin: Optional[VideoConverterPlugin] = None


def get_plugin() -> VideoConverterPlugin:
    """Return the global plugin, or raise 503 if it is not configured."""
    if _plugin is None:
        raise HTTPException(status_code=503, detail="Video converter not configured")
    return _plugin


def set_plugin(plugin: Optional[VideoConverterPlugin]) -> None:
    """Set (or clear) the global plugin."""
    global _plugin
    _plugin = plugin


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/hooks/file-will-be-uploaded")
def file_will_be_uploaded(
    info: str = Form(...),
    file: UploadFile = File(...),
) -> Response:
    """Run the pre-commit hook on an upload.

    Returns:
        204 if the upload is left unchanged, 200 with the replacement bytes
        (new FileInfo JSON in the ``X-File-Info`` header) if it was converted.

    Raises:
        HTTPException 400: If *info* is not a valid FileInfo.
        HTTPException 422: If the conversion failed and the upload must be rejected.
    """
    plugin = get_plugin()
    try:
        file_info = FileInfo.model_validate_json(info)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid file info: {exc}")

    output = io.BytesIO()
    new_info, error = plugin.file_will_be_uploaded(None, file_info, file.file, output)
    if error:
        raise HTTPException(status_code=422, detail=error)
    if new_info is None:
        return Response(status_code=204)

    return Response(
        content=output.getvalue(),
        media_type=new_info.mime_type,
        headers={FILE_INFO_HEADER: json.dumps(new_info.model_dump())},
    )


@router.post("/hooks/message-has-been-posted", status_code=202)
def message_has_been_posted(post: Post) -> Dict[str, str]:
    """Run the post-commit hook on a newly created post."""
    plugin = get_plugin()
    plugin.message_has_been_posted(None, post)
    return {"status": "processed", "post_id": post.id}


@router.get("/configuration", response_model=PluginConfiguration, response_model_by_alias=True)
def read_configuration() -> PluginConfiguration:
    """Return the configuration currently in effect."""
    return get_plugin().store.snapshot()


@router.put("/configuration", response_model=PluginConfiguration, response_model_by_alias=True)
def replace_configuration(raw: Dict[str, Any]) -> PluginConfiguration:
    """Replace the plugin configuration wholesale.

    Raises:
        HTTPException 422: If a value cannot be coerced to its type.
    """
    try:
        return get_plugin().on_configuration_change(raw)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))
