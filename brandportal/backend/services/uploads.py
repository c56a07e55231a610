"""Branding asset uploads: save to local disk, served under upload_url_prefix."""
import os
import hashlib
import time
from typing import BinaryIO

from brandportal.backend.config import get_settings
from brandportal.errors import ValidationError

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico"}


def upload_dir() -> str:
    s = get_settings()
    path = (s.upload_dir or "/app/storage/uploads").rstrip("/")
    os.makedirs(path, exist_ok=True)
    return path


def public_url(filename: str) -> str:
    prefix = (get_settings().upload_url_prefix or "/uploads").rstrip("/")
    return f"{prefix}/{filename}"


def asset_filename(kind: str, original_name: str | None, now_ms: int | None = None) -> str:
    """`logo-1741979910954.png` style name; rejects non-image extensions."""
    ext = os.path.splitext(original_name or "")[1].lower()
    if ext not in IMAGE_EXTENSIONS:
        raise ValidationError(f"Unsupported file type {ext or '(none)'}; expected an image")
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{kind}-{stamp}{ext}"


def save_upload(stream: BinaryIO, dst_path: str, max_bytes: int | None = None) -> tuple[int, str]:
    """Save stream to path and return (size_bytes, sha256). Oversized uploads are removed."""
    os.makedirs(os.path.dirname(dst_path), exist_ok=True)
    h = hashlib.sha256()
    size = 0
    with open(dst_path, "wb") as f:
        while True:
            chunk = stream.read(1024 * 1024)
            if not chunk:
                break
            size += len(chunk)
            if max_bytes is not None and size > max_bytes:
                f.close()
                os.remove(dst_path)
                raise ValidationError(f"File is larger than {max_bytes // (1024 * 1024)} MB")
            f.write(chunk)
            h.update(chunk)
    if size == 0:
        os.remove(dst_path)
        raise ValidationError("Uploaded file is empty")
    return size, h.hexdigest()


def store_asset(kind: str, original_name: str | None, stream: BinaryIO) -> tuple[str, int]:
    """Persist an uploaded asset. Returns (public_url, size_bytes)."""
    filename = asset_filename(kind, original_name)
    dst = os.path.join(upload_dir(), filename)
    size, _sha = save_upload(stream, dst, max_bytes=get_settings().max_upload_mb * 1024 * 1024)
    return public_url(filename), size
