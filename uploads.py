"""
Local media storage

Every resource handler stores images through one ``UploadStore`` obtained
with ``Depends(get_upload_store)``. Files land in ``UPLOAD_DIR`` under a
timestamp-prefixed name and are referenced by their public path, e.g.
``/uploads/20250101120000123456-logo.png``.
"""
import base64
import binascii
import logging
import os
import re
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


class UploadStore:
    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self.upload_dir = upload_dir
        self.url_prefix = url_prefix.rstrip("/")

    def _filename(self, original: str) -> str:
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
        name = secure_filename(original or "") or "upload"
        return f"{stamp}-{name}"

    def _write(self, filename: str, data: bytes) -> str:
        os.makedirs(self.upload_dir, exist_ok=True)
        dest = os.path.join(self.upload_dir, filename)
        with open(dest, "wb") as f:
            f.write(data)
        logger.info("Stored upload %s (%d bytes)", filename, len(data))
        return f"{self.url_prefix}/{filename}"

    async def save(self, file: UploadFile) -> str:
        """Write an uploaded file and return its public path.

        The disk write runs in the thread pool so several uploads can be saved
        concurrently with ``asyncio.gather``.
        """
        data = await file.read()
        return await run_in_threadpool(self._write, self._filename(file.filename), data)

    def save_data_url(self, data_url: str) -> str:
        """Decode a base64 ``data:`` URL into a file and return its public path."""
        match = _DATA_URL.match(data_url)
        if not match:
            raise ValueError("Invalid data URL")
        try:
            data = base64.b64decode(match.group("data"), validate=False)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid data URL") from exc
        ext = match.group("mime").split("/")[1].split("+")[0] or "png"
        return self._write(self._filename(f"image.{ext}"), data)

    def store_image(self, value: Optional[str]) -> Optional[str]:
        """Persist ``data:`` URLs; other values (paths, external URLs) pass through."""
        if value and value.startswith("data:"):
            try:
                return self.save_data_url(value)
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid image data")
        return value

    def is_local(self, public_path: Optional[str]) -> bool:
        return bool(public_path) and public_path.startswith(self.url_prefix + "/")

    def path_for(self, name: str) -> Optional[str]:
        """Filesystem path of a stored upload, or None when it does not exist."""
        safe = os.path.basename(name)
        if not safe or safe != name:
            return None
        path = os.path.join(self.upload_dir, safe)
        return path if os.path.isfile(path) else None

    def remove(self, public_path: Optional[str]) -> bool:
        """Delete a previously stored upload; external URLs and missing files are ignored."""
        if not self.is_local(public_path):
            return False
        path = self.path_for(public_path[len(self.url_prefix) + 1:])
        if path is None:
            return False
        try:
            os.remove(path)
        except OSError:
            logger.warning("Failed to delete old upload %s", public_path, exc_info=True)
            return False
        return True


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.uploads
