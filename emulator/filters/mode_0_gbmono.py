# emulator/filters/mode_0_gbmono.py
#
# Монохромный LCD (DMG / Pocket / Light): квантование в 4 уровня прозрачности,
# сетка с зазорами, размытие "смаз" + "тень", смешивание в линейном свете.
from dataclasses import dataclass

import cv2
import numpy as np

from emulator.downsample import downsample
from utils.color_utils import LUMA_B, LUMA_G, LUMA_R, LinearColor, clamp01, float_to_byte, to_gamma
from utils.grid_utils import BufferPair

# Не менять без пересмотра всего, что ниже: зазор сетки рассчитан ровно на 5
GRID_SCALE = 5
NATIVE_MARGIN = 5
BORDER_ERROR = 0.03

SMEAR_KERNEL = np.array([0.1, 0.8, 0.1], dtype=np.float32)
SHADOW_KERNEL = np.array([0.006, 0.061, 0.241, 0.383, 0.241, 0.061, 0.006], dtype=np.float32)
SHADOW_OPACITY = 0.5
SHADOW_OFFSET = 1

# 4x4 Байер, [x % 4][y % 4]
BAYER_4X4 = np.array([
    [0.0, 0.5, 0.125, 0.625],
    [0.75, 0.25, 0.875, 0.375],
    [0.1875, 0.6875, 0.0625, 0.5625],
    [0.9375, 0.4375, 0.8125, 0.3125],
], dtype=np.float64)

OPACITY_LEVELS = (1.0, 2.0 / 3.0, 1.0 / 3.0, 0.07)


@dataclass(frozen=True)
class MonoDisplayProfile:
    # sRGB значения в [0,1]
    foreground: tuple
    foreground_opacity: float
    background: tuple


@dataclass(frozen=True)
class MonoAdjustment:
    brightness: float = 1.0
    contrast: float = 1.0
    invert: bool = False
    dither: bool = False
    edge_enhancement: float = 0.0


def adjusted_thresholds(mid_threshold, adjustment):
    """
    Три порога квантования. mid_threshold в [0,1] сводится к диапазону 0.25..0.75;
    при яркости и контрасте 1 получаются 0.25/0.5/0.75 плюс BORDER_ERROR.
    """
    threshold = (np.asarray(mid_threshold, dtype=np.float64) - 0.5) * 0.25 + 0.5
    spread = 0.25 / max(adjustment.contrast, 0.01)
    return np.stack([
        clamp01((threshold - spread + BORDER_ERROR) / adjustment.brightness),
        clamp01((threshold + BORDER_ERROR) / adjustment.brightness),
        clamp01((threshold + spread + BORDER_ERROR) / adjustment.brightness),
    ], axis=-1)


def threshold_map(width, height, adjustment):
    """Пороги для каждого пикселя: (height, width, 3)."""
    if adjustment.dither:
        xs = np.arange(width) % 4
        ys = np.arange(height) % 4
        mid = BAYER_4X4[xs[None, :], ys[:, None]]
    else:
        mid = np.full((height, width), 0.5)
    return adjusted_thresholds(mid, adjustment)


def quantize_lightness(l, thresholds, invert=False):
    levels = OPACITY_LEVELS[::-1] if invert else OPACITY_LEVELS
    l = np.asarray(l, dtype=np.float64)
    thresholds = np.asarray(thresholds, dtype=np.float64)
    out = np.select(
        [l <= thresholds[..., 0], l <= thresholds[..., 1], l <= thresholds[..., 2]],
        list(levels[:3]),
        default=levels[3],
    )
    return out if out.ndim else float(out)


def lightness(linear_rgb):
    """Яркость -> CIE L*, нормировано в [0,1]."""
    lum = linear_rgb[..., 0] * LUMA_R + linear_rgb[..., 1] * LUMA_G + linear_rgb[..., 2] * LUMA_B
    l = np.where(lum <= 216.0 / 24389.0, lum * (24389.0 / 27.0), np.power(np.maximum(lum, 0.0), 1.0 / 3.0) * 116.0 - 16.0)
    return clamp01(l / 100.0)


def enhance_edges(l, level):
    if level <= 0.0:
        return l
    padded = np.pad(l, 1, mode="edge")
    neighbours = padded[1:-1, :-2] + padded[1:-1, 2:] + padded[:-2, 1:-1] + padded[2:, 1:-1]
    return l + (l * 4.0) * level - neighbours * level


def quantize_alpha(grid, profile, adjustment):
    l = enhance_edges(lightness(grid.data), adjustment.edge_enhancement)
    thresholds = threshold_map(grid.width, grid.height, adjustment)
    alpha = quantize_lightness(l, thresholds, adjustment.invert)
    return (alpha * profile.foreground_opacity).astype(np.float32)


def upscale_with_gaps(alpha, out_width, out_height, margin):
    """5x с зазором в 1 пиксель по обеим осям, внутри поля margin."""
    buff = np.zeros((out_height, out_width), dtype=np.float32)
    up = np.repeat(np.repeat(alpha, GRID_SCALE, axis=0), GRID_SCALE, axis=1)
    h, w = up.shape
    gap = (np.arange(w)[None, :] % GRID_SCALE >= GRID_SCALE - 1) | (np.arange(h)[:, None] % GRID_SCALE >= GRID_SCALE - 1)
    up[gap] = 0.0
    buff[margin:margin + h, margin:margin + w] = up
    return buff


def blur_pass(pair, kernel, horizontal):
    """Один проход разделимого размытия: current -> scratch, затем swap. Снаружи нули."""
    k = kernel.reshape(1, -1) if horizontal else kernel.reshape(-1, 1)
    pair.scratch = cv2.filter2D(pair.current, -1, k, dst=pair.scratch, borderType=cv2.BORDER_CONSTANT)
    return pair.swap()


def separable_blur(pair, kernel):
    blur_pass(pair, kernel, horizontal=True)
    return blur_pass(pair, kernel, horizontal=False)


def bilinear_scale_alpha(src, to_width, to_height):
    from_height, from_width = src.shape
    x_ratio = np.float32(from_width) / np.float32(to_width)
    y_ratio = np.float32(from_height) / np.float32(to_height)
    xf = np.arange(to_width, dtype=np.float32) * x_ratio
    yf = np.arange(to_height, dtype=np.float32) * y_ratio
    xi = xf.astype(np.intp)
    yi = yf.astype(np.intp)
    xf = (xf - xi.astype(np.float32))[None, :]
    yf = (yf - yi.astype(np.float32))[:, None]

    padded = np.zeros((from_height + 1, from_width + 1), dtype=np.float32)
    padded[:from_height, :from_width] = src
    a = padded[yi[:, None], xi[None, :]]
    b = padded[yi[:, None], xi[None, :] + 1]
    c = padded[yi[:, None] + 1, xi[None, :]]
    d = padded[yi[:, None] + 1, xi[None, :] + 1]
    return ((1.0 - xf) * (1.0 - yf) * a + xf * (1.0 - yf) * b + (1.0 - xf) * yf * c + xf * yf * d).astype(np.float32)


def shadow_blur(fg_buff):
    """
    Широкое размытие для тени: уменьшить примерно вдвое (с округлением вверх),
    размыть, вернуть к исходному размеру. Так не нужен огромный kernel.
    """
    out_height, out_width = fg_buff.shape
    small_w = (out_width + 1) // 2
    small_h = (out_height + 1) // 2

    pair = BufferPair(small_w, small_h)
    pair.current[...] = bilinear_scale_alpha(fg_buff, small_w, small_h)
    separable_blur(pair, SHADOW_KERNEL)
    return bilinear_scale_alpha(pair.current, out_width, out_height)


def composite(fg_buff, shadow_buff, fg, bg):
    out_height, out_width = fg_buff.shape
    shadow = np.zeros((out_height, out_width), dtype=np.float64)
    o = SHADOW_OFFSET
    shadow[o:, o:] = shadow_buff[:out_height - o, :out_width - o]
    shadow = shadow[..., None] * SHADOW_OPACITY

    c = bg[None, None, :] * (1.0 - shadow)
    opacity = fg_buff.astype(np.float64)[..., None]
    c = fg[None, None, :] * opacity + c * (1.0 - opacity)
    return float_to_byte(to_gamma(c))


def apply_gbmono(grid, profile, adjustment=None):
    """
    grid: сетка устройства в линейном свете.
    Возвращает RGB uint8 размером (5*h + 50, 5*w + 50, 3).
    """
    adjustment = adjustment or MonoAdjustment()

    # Фон без прозрачности: LCD нужно смешивать в линейном свете
    fg = LinearColor.from_gamma(*profile.foreground).as_array()
    bg = LinearColor.from_gamma(*profile.background).as_array()

    alpha = quantize_alpha(grid, profile, adjustment)

    width, height = grid.width * GRID_SCALE, grid.height * GRID_SCALE
    margin = NATIVE_MARGIN * GRID_SCALE
    out_width, out_height = width + margin * 2, height + margin * 2

    pair = BufferPair(out_width, out_height)
    pair.current[...] = upscale_with_gaps(alpha, out_width, out_height, margin)

    # лёгкий смаз краёв пикселей
    separable_blur(pair, SMEAR_KERNEL)
    fg_buff = pair.take()

    shadow_buff = shadow_blur(fg_buff)
    return composite(fg_buff, shadow_buff, fg, bg)


def apply_gbmono_filter(rgba, stride, profile, table, adjustment=None):
    grid = downsample(rgba, stride, table)
    return apply_gbmono(grid, profile, adjustment)
