"""Avatar ingestion: validate, decode, center-crop, resample, re-encode, store.

The resample is a plain nearest-neighbour mapping with integer division so
that a given source always produces the same 256x256 output.
"""

import io
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from config import get_settings
from errors import StorageError, ValidationError
from profiles import set_avatar_path

logger = logging.getLogger(__name__)

# Configuration
MAX_FILE_SIZE = 2 * 1024 * 1024  # 2MiB
AVATAR_SIZE = 256
JPEG_QUALITY = 90
AVATAR_URL_PREFIX = "/cdn/avatars"

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"

def avatars_folder() -> str:
    return os.path.join(get_settings().upload_folder, "avatars")

def ensure_upload_directories():
    """Ensure upload directories exist"""
    Path(avatars_folder()).mkdir(parents=True, exist_ok=True)

def sniff_image_type(head: bytes) -> Optional[str]:
    """Content type from the leading bytes; only JPEG and PNG are recognised."""
    if head.startswith(JPEG_MAGIC):
        return "image/jpeg"
    if head.startswith(PNG_MAGIC):
        return "image/png"
    return None

def center_square(width: int, height: int) -> Tuple[int, int, int]:
    """Largest centered square: (origin_x, origin_y, side)."""
    side = min(width, height)
    return (width - side) // 2, (height - side) // 2, side

def source_coordinate(dest: int, origin: int, side: int, size: int = AVATAR_SIZE) -> int:
    return origin + dest * side // size

def crop_and_resample(img: Image.Image, size: int = AVATAR_SIZE) -> Image.Image:
    """Center-square crop then nearest-neighbour resample to size x size."""
    rgb = img.convert("RGB")
    origin_x, origin_y, side = center_square(*rgb.size)
    src = rgb.load()
    out = Image.new("RGB", (size, size))
    dst = out.load()
    columns = [source_coordinate(x, origin_x, side, size) for x in range(size)]
    for y in range(size):
        sy = source_coordinate(y, origin_y, side, size)
        for x, sx in enumerate(columns):
            dst[x, y] = src[sx, sy]
    return out

def decode_image(raw: bytes, declared_size: int) -> Image.Image:
    """Validate the upload and decode it. Any rejection is a ValidationError."""
    if declared_size > MAX_FILE_SIZE or len(raw) > MAX_FILE_SIZE:
        raise ValidationError("Avatar exceeds 2MiB limit", field="avatar")
    if sniff_image_type(raw[:512]) is None:
        raise ValidationError("Avatar must be a JPEG or PNG image", field="avatar")
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ValidationError("Avatar could not be decoded", field="avatar") from exc
    return img

def encode_jpeg(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        img.save(buf, format="JPEG", quality=JPEG_QUALITY)
    except OSError as exc:
        raise StorageError(str(exc), "encode") from exc
    return buf.getvalue()

def avatar_filename(user_id: int) -> str:
    return f"{user_id}.jpg"

def get_avatar_url(user_id: int) -> str:
    return f"{AVATAR_URL_PREFIX}/{avatar_filename(user_id)}"

def save_avatar(user_id: int, data: bytes) -> str:
    """Write the avatar file, replacing any previous one for this user."""
    file_path = os.path.join(avatars_folder(), avatar_filename(user_id))
    try:
        ensure_upload_directories()
        with open(file_path, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise StorageError(str(exc), "write") from exc
    return file_path

def ingest_avatar(user_id: int, raw: bytes, declared_size: int) -> str:
    """Run the whole pipeline and return the public avatar path.

    The file write and the user row update are separate steps; a crash in
    between leaves an unreferenced file behind.
    """
    img = decode_image(raw, declared_size)
    data = encode_jpeg(crop_and_resample(img))
    save_avatar(user_id, data)
    avatar_path = get_avatar_url(user_id)
    set_avatar_path(user_id, avatar_path)
    logger.info("Avatar updated", extra={"user_id": user_id})
    return avatar_path
