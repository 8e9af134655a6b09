# emulator/converter.py
import io
from dataclasses import dataclass, field

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from emulator.downsample import crt_frame_margins, scaled_buffer_size
from emulator.filters import GB, CrtMode, MonoAdjustment, get_filter
from utils.color_utils import LinearTable, approximately_equal

# Больше этого не отдаём: 240x160 при масштабе 8
MAX_OUTPUT_PIXELS = 240 * 160 * 8 * 8
MAX_SCALE = 8

GBA_ASPECT = 240.0 / 160.0
GB_ASPECT = 160.0 / 144.0


class DecodeError(ValueError):
    """Входные байты не являются изображением."""


class OutputTooLargeError(ValueError):
    """Ожидаемый размер результата больше допустимого."""


def _check_color(name, color):
    if len(color) != 3 or any(not 0.0 <= c <= 1.0 for c in color):
        raise ValueError(f"{name} must be three values in [0, 1], got {color!r}")


@dataclass(frozen=True)
class FilterConfig:
    color_mode: int = 0
    lcd_grid_mode: int = 0
    output_scale: int = 1
    custom_foreground: tuple = GB.foreground
    custom_foreground_opacity: float = 1.0
    custom_background: tuple = GB.background
    # свой профиль панели вместо встроенного (режимы 4-7)
    display_profile: object = None
    adjustment: MonoAdjustment = field(default_factory=MonoAdjustment)

    def __post_init__(self):
        if not 1 <= self.output_scale <= MAX_SCALE:
            raise ValueError(f"output_scale must be in 1..{MAX_SCALE}, got {self.output_scale}")
        if not 0.0 <= self.custom_foreground_opacity <= 1.0:
            raise ValueError(f"custom_foreground_opacity must be in [0, 1], got {self.custom_foreground_opacity}")
        _check_color("custom_foreground", self.custom_foreground)
        _check_color("custom_background", self.custom_background)


def detect_device(width, height):
    """
    Определяет устройство по соотношению сторон и кратность увеличения скриншота.
    Некоторые приложения экспортируют скриншоты с целым масштабом.
    Возвращает (имя или None, stride).
    """
    aspect = width / height
    name, stride = None, 1
    if approximately_equal(aspect, GBA_ASPECT):
        name, stride = "GBA", width // 240
    if approximately_equal(aspect, GB_ASPECT):
        name, stride = "GB", width // 160
    return name, max(stride, 1)


def output_pixels(width, height, stride, scale, crt=False):
    """Число пикселей результата; для CRT с учётом рамки и добивки SNES-кадра."""
    if crt:
        _, _, frame_w, frame_h = crt_frame_margins(width, height, stride)
        device_w, device_h = scaled_buffer_size(frame_w, frame_h, stride)
    else:
        device_w, device_h = width // stride, height // stride
    return (device_w * scale) * (device_h * scale)


def check_output_size(width, height, stride, scale, crt=False):
    pixels = output_pixels(width, height, stride, scale, crt)
    if pixels > MAX_OUTPUT_PIXELS:
        raise OutputTooLargeError(
            f"The expected output image size is too large: {pixels} > {MAX_OUTPUT_PIXELS} pixels")
    return pixels


def convert_pixels(rgba, config, table=None):
    """
    Ядро: RGBA uint8 (h, w, 4) -> RGBA uint8 результата (alpha = 255).
    Никакого I/O; таблицу линеаризации лучше построить один раз и передавать сюда.
    """
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] not in (3, 4) or rgba.dtype != np.uint8:
        raise ValueError(f"expected uint8 (h, w, 3|4) pixels, got {rgba.dtype} {rgba.shape}")
    if table is None:
        table = LinearTable()

    height, width = rgba.shape[:2]
    _, stride = detect_device(width, height)
    mode = get_filter(config)
    check_output_size(width, height, stride, config.output_scale, crt=isinstance(mode, CrtMode))
    rgb = mode.apply(rgba, stride, config.output_scale, table)

    out = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
    out[..., :3] = rgb
    out[..., 3] = 255
    return out


def load_image(data):
    """Байты -> RGBA массив, с учётом EXIF-ориентации."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.load()
            im = ImageOps.exif_transpose(im)
            return np.array(im.convert("RGBA"))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e


def encode_png(pixels):
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


def convert_image(image, config, table=None):
    image = ImageOps.exif_transpose(image)
    out = convert_pixels(np.array(image.convert("RGBA")), config, table)
    return Image.fromarray(out)


def execute(data, config, table=None):
    """Закодированное изображение -> PNG байты результата."""
    return encode_png(convert_pixels(load_image(data), config, table))
