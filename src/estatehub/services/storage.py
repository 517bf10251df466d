"""Image storage for property photos.

Files live under <upload_dir>/properties/ and are served at
/uploads/properties/<name>. A save() call is all-or-nothing: every file is
validated before anything touches the disk, each file is written to a
temp name and renamed into place, and a failure part way through removes
what this call already wrote.

The database row is updated by the caller after save() returns. If that
update fails the files stay behind as orphans; nothing sweeps them.
"""

import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

from estatehub.errors import ValidationFailed

logger = structlog.get_logger()

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
}

URL_PREFIX = "/uploads/properties/"


@dataclass
class IncomingImage:
    filename: str
    content_type: Optional[str]
    data: bytes


class ImageStorage:
    """Writes and removes property images on the local filesystem."""

    def __init__(self, upload_dir: str, max_bytes: int, max_files: int):
        self.root = Path(upload_dir) / "properties"
        self.max_bytes = max_bytes
        self.max_files = max_files

    def ensure_dir(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def validate(self, images: list[IncomingImage]) -> None:
        if not images:
            raise ValidationFailed(
                "Please select at least one image to upload",
                error="No files uploaded",
            )
        if len(images) > self.max_files:
            raise ValidationFailed(
                f"At most {self.max_files} images can be uploaded at once",
                error="Too many files",
            )
        for image in images:
            if image.content_type not in ALLOWED_MIME_TYPES:
                raise ValidationFailed(
                    "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.",
                    error="Invalid file type",
                )
            if len(image.data) > self.max_bytes:
                raise ValidationFailed(
                    f"{image.filename} exceeds the {self.max_bytes // (1024 * 1024)}MB limit",
                    error="File too large",
                )

    def _unique_name(self, original: str) -> str:
        # Only the base name is kept, so "../" in an upload name goes nowhere.
        base = os.path.basename(original or "image")
        stem, ext = os.path.splitext(base)
        stem = "".join(c for c in stem if c.isalnum() or c in "-_") or "image"
        ext = "".join(c for c in ext if c.isalnum() or c == ".")
        suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{stem}-{suffix}{ext.lower()}"

    def save(self, images: list[IncomingImage]) -> list[str]:
        """Validate and write all images; returns their public URLs."""
        self.validate(images)
        self.ensure_dir()

        written: list[Path] = []
        tmp: Optional[Path] = None
        try:
            for image in images:
                target = self.root / self._unique_name(image.filename)
                tmp = target.with_name(target.name + ".part")
                tmp.write_bytes(image.data)
                os.replace(tmp, target)
                written.append(target)
        except OSError:
            for path in written:
                path.unlink(missing_ok=True)
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise

        logger.info("images.saved", count=len(written))
        return [URL_PREFIX + path.name for path in written]

    def path_for(self, url: str) -> Optional[Path]:
        """Map a public URL back to a file we own, or None."""
        if not url.startswith(URL_PREFIX):
            return None
        name = url[len(URL_PREFIX):]
        if not name or name != os.path.basename(name):
            return None
        return self.root / name

    def delete(self, url: str) -> bool:
        """Remove the file behind a URL. Returns False if it wasn't ours or is gone."""
        path = self.path_for(url)
        if path is None or not path.exists():
            return False
        path.unlink()
        logger.info("images.deleted", file=path.name)
        return True
