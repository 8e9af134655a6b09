# emulator/filters/mode_8_crt.py
#
# CRT: реконструкция Lanczos2 по горизонтали, веса сканлайнов по вертикали, дотмаска.
# Основано на CRT-interlaced (CRT Geom), (C) 2010-2012 cgwg, Themaister and DOLLS, GPL.
# Без кривизны экрана, дотмаска зависит от размера исходника, обычный Lanczos2.
from fractions import Fraction

import numpy as np

from emulator.downsample import crt_frame_margins, downsample
from utils.color_utils import clamp, clamp01, float_to_byte, lerp

CRT_SCANLINE_WEIGHT = 0.3
CRT_LUM = 0.0
CRT_DOT_MASK = 0.2
CRT_LANCZOS_SIZE = 2

# считается точно, затем одно округление до float64
CRT_PWR = float(
    1 / ((Fraction("-0.7") * (1 - Fraction(str(CRT_SCANLINE_WEIGHT))) + 1)
         * (Fraction("-0.5") * Fraction(str(CRT_DOT_MASK)) + 1)) - Fraction("1.25")
)

DOT_MASK_LOW = np.array([1.0, float(1 - Fraction(str(CRT_DOT_MASK))), 1.0])
DOT_MASK_HIGH = np.array([DOT_MASK_LOW[1], 1.0, DOT_MASK_LOW[1]])


def lanczos2(d):
    d = np.asarray(d, dtype=np.float64)
    safe = np.where(d == 0.0, 1.0, d)
    w = (CRT_LANCZOS_SIZE * np.sin(np.pi * safe) * np.sin(np.pi * (safe / CRT_LANCZOS_SIZE))) / (np.pi * np.pi * safe * safe)
    w = np.where(d == 0.0, 1.0, w)
    return w if w.ndim else float(w)


def scanline_weights(distance, color):
    wid = color * color * color * color * 2.0 + 2.0
    weights = np.asarray(distance / CRT_SCANLINE_WEIGHT)
    if weights.ndim:
        weights = weights[..., None]
    return np.exp(-np.power(np.power(wid * 0.5, -0.5) * weights, wid)) * (CRT_LUM + 1.4) / (wid * 0.2 + 0.6)


def crt_inv_gamma(col):
    """Гамма-коррекция выхода с учётом гаммы, зашитой в сканлайны и маску."""
    cir = col - 1.0
    cir = cir * cir
    return lerp(np.sqrt(col), np.sqrt(1.0 - cir), CRT_PWR)


def horizontal_lanczos(grid, scale):
    """
    Lanczos2 по X для всех строк сетки плюс по одной нулевой строке сверху и снизу.
    Возвращает (rows, xx_frac): массив (src_h + 2, out_w, 3) и дробную часть X.
    """
    src_w = grid.width
    out_w = src_w * scale

    x = np.arange(out_w, dtype=np.float64)
    out_texel = 1.0 / out_w
    tex_x = out_texel * (x + 0.5)
    ratio_x = tex_x * src_w - 0.5
    xx = np.floor(ratio_x)
    uv_ratio_x = ratio_x - xx

    # без сдвига на полтекселя для Lanczos
    out_tex_x = x * out_texel
    src_texel = 1.0 / src_w
    src_tex_x = xx * src_texel

    ys = np.arange(-1, grid.height + 1)
    rows = np.zeros((len(ys), out_w, 3), dtype=np.float64)
    for lx in range(-CRT_LANCZOS_SIZE, CRT_LANCZOS_SIZE + 1):
        sample_tex_x = src_tex_x + lx * src_texel
        d = clamp((sample_tex_x - out_tex_x) * src_w, -CRT_LANCZOS_SIZE, CRT_LANCZOS_SIZE)
        w = lanczos2(d)
        taps = grid.load((xx.astype(np.intp) + lx)[None, :], ys[:, None])
        rows += taps * w[None, :, None]
    return rows, uv_ratio_x


def apply_crt(grid, scale):
    """
    grid: сетка устройства (уже с рамкой), scale: целый масштаб вывода.
    Возвращает RGB uint8 (src_h*scale, src_w*scale, 3).
    """
    src_h = grid.height
    out_h = src_h * scale
    filt = 1.0 / scale

    rows, uv_ratio_x = horizontal_lanczos(grid, scale)

    # Y намеренно без центрирования на полпикселя: так линия между сканлайнами ложится ровнее
    y = np.arange(out_h, dtype=np.float64)
    tex_y = (1.0 / out_h) * y
    ratio_y = tex_y * src_h - 0.5
    yy = np.floor(ratio_y)
    uv_ratio_y = (ratio_y - yy)[:, None]

    # строка yy лежит в rows под индексом yy + 1
    idx = yy.astype(np.intp) + 1
    col = clamp01(rows[idx])
    col2 = clamp01(rows[idx + 1])

    weights = scanline_weights(uv_ratio_y, col)
    weights2 = scanline_weights(1.0 - uv_ratio_y, col2)
    shifted = uv_ratio_y + 1.0 / 3.0 * filt
    weights = (weights + scanline_weights(shifted, col)) / 3.0
    weights2 = (weights2 + scanline_weights(np.abs(1.0 - shifted), col2)) / 3.0
    shifted = shifted - 2.0 / 3.0 * filt
    weights = weights + scanline_weights(np.abs(shifted), col) / 3.0
    weights2 = weights2 + scanline_weights(np.abs(1.0 - shifted), col2) / 3.0

    mul_res = col * weights + col2 * weights2

    # дотмаска
    green_weight = 1.0 - np.abs(uv_ratio_x * 2.0 - 1.0)
    mask = lerp(DOT_MASK_LOW[None, :], DOT_MASK_HIGH[None, :], green_weight[:, None])
    mul_res = clamp01(mul_res * mask[None, :, :])

    out = clamp01(crt_inv_gamma(mul_res))
    return float_to_byte(out)


def apply_crt_filter(rgba, stride, scale, table):
    """Полный путь CRT: поля кадра, прореживание, фильтр."""
    src_h, src_w = rgba.shape[:2]
    left, top, frame_w, frame_h = crt_frame_margins(src_w, src_h, stride)
    grid = downsample(rgba, stride, table, left_margin=left, top_margin=top, width=frame_w, height=frame_h)
    return apply_crt(grid, scale)
