import io
import os

import pytest
from PIL import Image

from errors import ValidationError
from file_utils import (
    AVATAR_SIZE, MAX_FILE_SIZE, avatars_folder, center_square, crop_and_resample, decode_image,
    ingest_avatar, sniff_image_type, source_coordinate,
)
from profiles import load_profile


def _encode(img, fmt):
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def test_center_square_of_landscape_image():
    assert center_square(300, 200) == (50, 0, 200)
    assert center_square(200, 300) == (0, 50, 200)
    assert center_square(256, 256) == (0, 0, 256)


def test_source_coordinate_stays_inside_the_square():
    assert source_coordinate(0, 50, 200) == 50
    assert source_coordinate(255, 50, 200) == 249
    assert source_coordinate(255, 0, 200) == 199
    # upscaling repeats source pixels
    assert source_coordinate(1, 0, 100) == 0


@pytest.mark.parametrize("head,expected", [
    (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\nrest", "image/png"),
    (b"GIF89a", None),
    (b"hello world", None),
    (b"", None),
])
def test_sniff_image_type(head, expected):
    assert sniff_image_type(head) == expected


def test_resample_picks_pixels_from_the_center_square():
    # left and right 50px bands are red, the middle square is blue
    img = Image.new("RGB", (300, 200), (255, 0, 0))
    img.paste((0, 0, 255), (50, 0, 250, 200))

    out = crop_and_resample(img)

    assert out.size == (AVATAR_SIZE, AVATAR_SIZE)
    assert out.getpixel((0, 0)) == (0, 0, 255)
    assert out.getpixel((255, 255)) == (0, 0, 255)


def test_resample_is_deterministic():
    img = Image.new("RGB", (40, 30))
    for x in range(40):
        for y in range(30):
            img.putpixel((x, y), (x * 6, y * 8, 0))

    first = crop_and_resample(img)
    assert first.tobytes() == crop_and_resample(img).tobytes()
    assert first.getpixel((0, 0)) == img.getpixel((5, 0))


def test_png_with_alpha_is_flattened_to_rgb():
    img = Image.new("RGBA", (64, 64), (10, 20, 30, 128))
    out = crop_and_resample(decode_image(_encode(img, "PNG"), 0))
    assert out.mode == "RGB"


def test_decode_rejects_oversized_upload():
    raw = _encode(Image.new("RGB", (8, 8)), "PNG")
    with pytest.raises(ValidationError, match="2MiB"):
        decode_image(raw, MAX_FILE_SIZE + 1)


def test_decode_rejects_unsupported_format():
    raw = _encode(Image.new("RGB", (8, 8)), "GIF")
    with pytest.raises(ValidationError, match="JPEG or PNG"):
        decode_image(raw, len(raw))


def test_decode_rejects_truncated_image():
    raw = _encode(Image.new("RGB", (64, 64)), "PNG")[:40]
    with pytest.raises(ValidationError, match="decoded"):
        decode_image(raw, len(raw))


def test_ingest_writes_jpeg_and_updates_profile(make_user):
    user_id = make_user("poet")
    raw = _encode(Image.new("RGB", (300, 200), (0, 128, 0)), "JPEG")

    url = ingest_avatar(user_id, raw, len(raw))

    assert url == f"/cdn/avatars/{user_id}.jpg"
    assert load_profile("poet")["avatar_path"] == url
    path = os.path.join(avatars_folder(), f"{user_id}.jpg")
    with Image.open(path) as stored:
        assert stored.format == "JPEG"
        assert stored.size == (AVATAR_SIZE, AVATAR_SIZE)


def test_rejected_upload_leaves_profile_untouched(make_user):
    user_id = make_user("poet")
    with pytest.raises(ValidationError):
        ingest_avatar(user_id, b"not an image", 12)
    assert load_profile("poet")["avatar_path"] is None
    assert not os.path.exists(os.path.join(avatars_folder(), f"{user_id}.jpg"))
