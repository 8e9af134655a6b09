import io

import numpy as np
import pytest
from PIL import Image

from emulator import DecodeError, FilterConfig, OutputTooLargeError, convert_pixels, detect_device, execute
from emulator.converter import MAX_OUTPUT_PIXELS, check_output_size, convert_image, load_image, output_pixels
from emulator.filters import (
    GB,
    GB_LIGHT,
    GBA,
    GBA_SP_WHITE,
    CrtMode,
    GridMode,
    MonoMode,
    get_filter,
    mode_name,
)
from emulator.filters.mode_4_lcdgrid import GridAlgorithm
from utils.color_utils import LinearTable


def png_bytes(width, height, color=(200, 120, 40, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def test_detect_device():
    assert detect_device(240, 160) == ("GBA", 1)
    assert detect_device(480, 320) == ("GBA", 2)
    assert detect_device(160, 144) == ("GB", 1)
    assert detect_device(640, 576) == ("GB", 4)
    assert detect_device(100, 100) == (None, 1)
    assert detect_device(481, 320) == (None, 1)


def test_detect_device_stride_is_at_least_one():
    assert detect_device(120, 80) == ("GBA", 1)
    assert detect_device(80, 72) == ("GB", 1)


def test_output_size_guard():
    assert check_output_size(240, 160, 1, 8) == MAX_OUTPUT_PIXELS
    assert check_output_size(480, 320, 2, 8) == MAX_OUTPUT_PIXELS
    with pytest.raises(OutputTooLargeError):
        check_output_size(481, 320, 1, 8)


def test_convert_pixels_rejects_too_large():
    config = FilterConfig(color_mode=5, output_scale=8)
    with pytest.raises(OutputTooLargeError):
        convert_pixels(np.zeros((320, 481, 4), dtype=np.uint8), config)


def test_crt_output_size_counts_frame():
    # рамка по 4 пикселя устройства с каждой стороны
    assert output_pixels(240, 160, 1, 1, crt=True) == 248 * 168
    assert output_pixels(480, 320, 2, 2, crt=True) == (248 * 2) * (168 * 2)
    # SNES-кадр 224 строки добивается до 240
    assert output_pixels(256, 224, 1, 1, crt=True) == 264 * 248
    with pytest.raises(OutputTooLargeError):
        check_output_size(240, 160, 1, 8, crt=True)


def test_convert_pixels_rejects_crt_frame_overflow():
    config = FilterConfig(color_mode=8, output_scale=8)
    with pytest.raises(OutputTooLargeError):
        convert_pixels(np.zeros((160, 240, 4), dtype=np.uint8), config)


def test_load_image_rejects_decompression_bomb(monkeypatch):
    # Pillow бросает DecompressionBombError выше 2 * MAX_IMAGE_PIXELS
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(DecodeError):
        load_image(png_bytes(64, 64))


def test_convert_pixels_rejects_bad_input():
    with pytest.raises(ValueError):
        convert_pixels(np.zeros((4, 4), dtype=np.uint8), FilterConfig())
    with pytest.raises(ValueError):
        convert_pixels(np.zeros((4, 4, 4), dtype=np.float32), FilterConfig())


def test_filter_config_validation():
    with pytest.raises(ValueError):
        FilterConfig(output_scale=0)
    with pytest.raises(ValueError):
        FilterConfig(output_scale=9)
    with pytest.raises(ValueError):
        FilterConfig(custom_foreground_opacity=1.5)
    with pytest.raises(ValueError):
        FilterConfig(custom_background=(2.0, 0.0, 0.0))


def test_get_filter_dispatch():
    assert get_filter(FilterConfig(color_mode=0)) == MonoMode(GB, FilterConfig().adjustment)
    assert get_filter(FilterConfig(color_mode=2)).profile == GB_LIGHT

    custom = get_filter(FilterConfig(color_mode=3, custom_foreground=(1.0, 0.0, 0.0),
                                     custom_foreground_opacity=0.5))
    assert isinstance(custom, MonoMode)
    assert custom.profile.foreground == (1.0, 0.0, 0.0)
    assert custom.profile.foreground_opacity == 0.5
    assert custom.profile.background == GB.background

    assert get_filter(FilterConfig(color_mode=5, lcd_grid_mode=1)) == GridMode(GBA, GridAlgorithm.SMEAR)
    assert get_filter(FilterConfig(color_mode=7, lcd_grid_mode=9)).algorithm is GridAlgorithm.NONE
    assert get_filter(FilterConfig(color_mode=8)) == CrtMode()
    assert get_filter(FilterConfig(color_mode=42)) == CrtMode()


def test_get_filter_profile_override():
    mode = get_filter(FilterConfig(color_mode=4, display_profile=GBA_SP_WHITE))
    assert mode.profile == GBA_SP_WHITE


def test_get_filter_negative_mode():
    with pytest.raises(ValueError):
        get_filter(FilterConfig(color_mode=-1))


def test_mode_name():
    assert mode_name(0) == "GB (DMG)"
    assert mode_name(8) == "CRT"
    assert mode_name(100) == "CRT"


@pytest.mark.parametrize("mode, expected", [
    (0, (60, 60)),
    (4, (16, 16)),
    (8, (32, 32)),
])
def test_convert_pixels_output_size(mode, expected):
    rgba = np.full((2, 2, 4), 255, dtype=np.uint8) if mode == 0 else np.full((8, 8, 4), 255, dtype=np.uint8)
    out = convert_pixels(rgba, FilterConfig(color_mode=mode, output_scale=2), LinearTable())
    assert out.shape[:2] == expected
    assert out.shape[2] == 4
    assert np.all(out[..., 3] == 255)


def test_convert_pixels_accepts_rgb():
    out = convert_pixels(np.zeros((3, 3, 3), dtype=np.uint8), FilterConfig(color_mode=6))
    assert out.shape == (3, 3, 4)


def test_execute_round_trip():
    data = execute(png_bytes(8, 8), FilterConfig(color_mode=4, output_scale=2))
    with Image.open(io.BytesIO(data)) as im:
        assert im.format == "PNG"
        assert im.size == (16, 16)


def test_execute_rejects_junk():
    with pytest.raises(DecodeError):
        execute(b"definitely not an image", FilterConfig())


def test_load_image_returns_rgba():
    pixels = load_image(png_bytes(5, 4))
    assert pixels.shape == (4, 5, 4)
    assert pixels.dtype == np.uint8
    assert list(pixels[0, 0]) == [200, 120, 40, 255]


def test_convert_image():
    im = Image.new("RGB", (8, 8), (10, 20, 30))
    out = convert_image(im, FilterConfig(color_mode=8, output_scale=1))
    assert out.size == (16, 16)
    assert out.mode == "RGBA"
