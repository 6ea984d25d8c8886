"""Destinations for accepted photos."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Protocol

import httpx

from camera_controller import CapturedImage

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("captures")
UPLOAD_TIMEOUT_S = 30.0
UPLOAD_FIELD = "file"


class PhotoUploadError(RuntimeError):
    """Raised when the upload endpoint rejects a photo or cannot be reached."""


class PhotoSink(Protocol):
    def save(self, image: CapturedImage) -> str:
        ...


def capture_filename(captured_at: float, prefix: str = "capture") -> str:
    stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(captured_at))
    millis = int((captured_at % 1) * 1000)
    return f"{prefix}_{stamp}_{millis:03d}.jpg"


class DirectoryPhotoSink:
    """Write photos as JPEG files into a folder."""

    def __init__(self, output_dir: Path | str = DEFAULT_OUTPUT_DIR) -> None:
        self.output_dir = Path(output_dir)

    def save(self, image: CapturedImage) -> str:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / capture_filename(image.captured_at)
        path.write_bytes(image.data)
        logger.info(f"Saved capture to {path}")
        return str(path)


class UploadPhotoSink:
    """POST photos to an upload endpoint as multipart form data.

    The endpoint answers with JSON carrying the stored object's ``url``
    (preferred) or ``path``.
    """

    def __init__(
        self,
        url: str,
        client: Optional[httpx.Client] = None,
        headers: Optional[dict] = None,
        file_name: str = "profile-photo.jpg",
    ) -> None:
        self.url = url
        self.file_name = file_name
        self._client = client or httpx.Client(timeout=UPLOAD_TIMEOUT_S, headers=headers)

    def save(self, image: CapturedImage) -> str:
        files = {UPLOAD_FIELD: (self.file_name, image.data, image.mime_type)}
        try:
            response = self._client.post(self.url, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PhotoUploadError(
                f"Upload rejected with status {exc.response.status_code}: {_error_detail(exc.response)}"
            ) from exc
        except httpx.HTTPError as exc:
            raise PhotoUploadError(f"Upload failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise PhotoUploadError("Upload response is not valid JSON") from exc

        location = payload.get("url") or payload.get("path") if isinstance(payload, dict) else None
        if not location:
            raise PhotoUploadError("Upload response did not include a url or path")
        logger.info(f"Uploaded capture to {location}")
        return location

    def close(self) -> None:
        self._client.close()


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return response.text
