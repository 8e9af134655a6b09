# emulator/filters/mode_4_lcdgrid.py
#
# Цветной LCD (GBC / GBA): эмуляция субпиксельной сетки + цветокоррекция панели.
# Профили панелей: Pokefan531 (https://forums.libretro.com/t/real-gba-and-ds-phat-colors/1540/220).
# Алгоритм SUBPIXEL основан на шейдере SameBoy, (c) 2015-2024 Lior Halphon, Expat License.
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from emulator.downsample import downsample
from utils.color_utils import clamp, clamp01, float_to_byte, lerp, to_gamma


class GridAlgorithm(IntEnum):
    SUBPIXEL = 0
    SMEAR = 1
    NONE = 2

    @classmethod
    def from_index(cls, index):
        if index == 0:
            return cls.SUBPIXEL
        if index == 1:
            return cls.SMEAR
        return cls.NONE


@dataclass(frozen=True)
class DisplayProfile:
    r: float
    gr: float
    br: float
    rg: float
    g: float
    bg: float
    rb: float
    gb: float
    b: float
    lum: float
    gamma: float
    gamma_offset: float
    bgr: bool


# Интегралы (1 - x^2 - x^4 + x^6)^2 и (1 - 2x^4 + x^6)^2
SMEAR_COEFFS_X = (1.0, -2.0 / 3.0, -1.0 / 5.0, 4.0 / 7.0, -1.0 / 9.0, -2.0 / 11.0, 1.0 / 13.0)
SMEAR_COEFFS_Y = (1.0, 0.0, -4.0 / 5.0, 2.0 / 7.0, 4.0 / 9.0, -4.0 / 11.0, 1.0 / 13.0)

# Параметры SameBoy
COLOR_LOW = 0.8
COLOR_HIGH = 1.0
SCANLINE_DEPTH = 0.1


def color_correct(c, profile):
    """
    c: (..., 3) в линейном свете, уже в [0,1].
    Матрица применяется последовательно R -> G -> B: новый R участвует в G, новые R и G участвуют в B.
    """
    p = profile
    # сжатие к гамме профиля со смещением
    c = np.power(c, (p.gamma + p.gamma_offset) / p.gamma)
    c = clamp01(c * p.lum)
    r = c[..., 0]
    g = c[..., 1]
    b = c[..., 2]
    r = p.r * r + p.gr * g + p.br * b
    g = p.rg * r + p.g * g + p.bg * b
    b = p.rb * r + p.gb * g + p.b * b
    return clamp01(np.stack([r, g, b], axis=-1))


def int_smear_func(z, coeffs):
    z2 = z * z
    zn = z
    ret = 0.0
    for coeff in coeffs:
        ret = ret + zn * coeff
        zn = zn * z2
    return ret


def int_smear(x, dx, d, coeffs):
    zl = clamp((x - dx * 0.5) / d, -1.0, 1.0)
    zh = clamp((x + dx * 0.5) / d, -1.0, 1.0)
    return d * (int_smear_func(zh, coeffs) - int_smear_func(zl, coeffs)) / dx


def _texcoords(src_w, src_h, scale):
    out_w, out_h = src_w * scale, src_h * scale
    # tex = шаг выходного текселя * (p + 0.5), именно в таком порядке операций
    tex_x = (1.0 / out_w) * (np.arange(out_w, dtype=np.float64) + 0.5)
    tex_y = (1.0 / out_h) * (np.arange(out_h, dtype=np.float64) + 0.5)
    return tex_x, tex_y


def grid_smear(grid, scale, bgr):
    src_w, src_h = grid.width, grid.height
    tex_x, tex_y = _texcoords(src_w, src_h, scale)
    out_w = len(tex_x)
    out_h = len(tex_y)

    tli_x = np.floor(tex_x * src_w - 0.4999).astype(np.intp)
    tli_y = np.floor(tex_y * src_h - 0.4999).astype(np.intp)

    subpix = (tex_x * src_w - 0.4999 - tli_x) * 3.0
    rsubpix = (1.0 / out_w) * src_w * 3.0
    lcol = np.stack([int_smear(subpix + 1.0, rsubpix, 1.5, SMEAR_COEFFS_X),
                     int_smear(subpix, rsubpix, 1.5, SMEAR_COEFFS_X),
                     int_smear(subpix - 1.0, rsubpix, 1.5, SMEAR_COEFFS_X)], axis=-1)
    rcol = np.stack([int_smear(subpix - 2.0, rsubpix, 1.5, SMEAR_COEFFS_X),
                     int_smear(subpix - 3.0, rsubpix, 1.5, SMEAR_COEFFS_X),
                     int_smear(subpix - 4.0, rsubpix, 1.5, SMEAR_COEFFS_X)], axis=-1)
    if bgr:
        lcol = lcol[:, ::-1]
        rcol = rcol[:, ::-1]

    subpix_y = tex_y * src_h - 0.4999 - tli_y
    rsubpix_y = (1.0 / out_h) * src_h
    tcol = int_smear(subpix_y, rsubpix_y, 0.63, SMEAR_COEFFS_Y)[:, None, None]
    bcol = int_smear(subpix_y - 1.0, rsubpix_y, 0.63, SMEAR_COEFFS_Y)[:, None, None]

    xs = tli_x[None, :]
    ys = tli_y[:, None]
    top_left = grid.load_clamped(xs, ys) * lcol[None] * tcol
    bottom_right = grid.load_clamped(xs + 1, ys + 1) * rcol[None] * bcol
    bottom_left = grid.load_clamped(xs, ys + 1) * lcol[None] * bcol
    top_right = grid.load_clamped(xs + 1, ys) * rcol[None] * tcol
    return top_left + bottom_right + bottom_left + top_right


def _lerp_bands(bands, pos, sub):
    """bands: шесть пар (от, до); полоса выбирается по pos, интерполяция по sub."""
    shape = np.broadcast_shapes(pos.shape, bands[0][0].shape)
    conditions = [np.broadcast_to(pos < k / 6.0, shape) for k in range(1, 6)]
    conditions.append(np.ones(shape, dtype=bool))
    starts = np.select(conditions, [b[0] for b in bands])
    ends = np.select(conditions, [b[1] for b in bands])
    return lerp(starts, ends, sub)


def grid_subpixel(grid, scale, depth=SCANLINE_DEPTH, low=COLOR_LOW, high=COLOR_HIGH):
    src_w, src_h = grid.width, grid.height
    tex_x, tex_y = _texcoords(src_w, src_h, scale)

    fx = tex_x * src_w
    fy = tex_y * src_h
    pos_x = (fx - np.floor(fx))[None, :, None]
    pos_y = (fy - np.floor(fy))[:, None, None]

    xs = np.floor(fx).astype(np.intp)[None, :]
    ys = np.floor(fy).astype(np.intp)[:, None]
    # texCoord -/+ texelSize попадает ровно в соседний текстель
    xl = np.floor((tex_x - 1.0 / src_w) * src_w).astype(np.intp)[None, :]
    xr = np.floor((tex_x + 1.0 / src_w) * src_w).astype(np.intp)[None, :]
    yu = np.floor((tex_y - 1.0 / src_h) * src_h).astype(np.intp)[:, None]
    yd = np.floor((tex_y + 1.0 / src_h) * src_h).astype(np.intp)[:, None]

    center = grid.load_clamped(xs, ys)
    left = grid.load_clamped(xl, ys)
    right = grid.load_clamped(xr, ys)

    # затемнение краёв строки: верхняя и нижняя шестая часть смешивается с соседней строкой
    top = pos_y < 1.0 / 6.0
    bottom = pos_y > 5.0 / 6.0
    t_up = 0.5 - pos_y * 0.5
    t_down = pos_y * 0.5
    dim_up = pos_y * depth + (1.0 - depth)
    dim_down = (1.0 - pos_y) * depth + (1.0 - depth)

    def darken(sample, x_idx):
        up = lerp(sample, grid.load_clamped(x_idx, yu), t_up) * dim_up
        down = lerp(sample, grid.load_clamped(x_idx, yd), t_down) * dim_down
        return np.where(top, up, np.where(bottom, down, sample))

    center = darken(center, xs)
    left = darken(left, xl)
    right = darken(right, xr)

    mid_left = lerp(left, center, 0.5)
    mid_right = lerp(right, center, 0.5)

    def rgb(r, g, b):
        return np.stack([r, g, b], axis=-1)

    cr, cg, cb = center[..., 0], center[..., 1], center[..., 2]
    lb = left[..., 2]
    rr, rg_ = right[..., 0], right[..., 1]
    mlb = mid_left[..., 2]
    mrr, mrg = mid_right[..., 0], mid_right[..., 1]

    bands = [
        (rgb(high * cr, low * cg, high * lb), rgb(high * cr, low * cg, low * lb)),
        (rgb(high * cr, low * cg, low * lb), rgb(high * cr, high * cg, low * mlb)),
        (rgb(high * cr, high * cg, low * mlb), rgb(low * mrr, high * cg, low * cb)),
        (rgb(low * mrr, high * cg, low * cb), rgb(low * rr, high * cg, high * cb)),
        (rgb(low * rr, high * cg, high * cb), rgb(low * rr, low * mrg, high * cb)),
        (rgb(low * rr, low * mrg, high * cb), rgb(high * rr, low * rg_, high * cb)),
    ]
    return _lerp_bands(bands, pos_x, pos_x)


def grid_none(grid, scale):
    src_w, src_h = grid.width, grid.height
    tex_x, tex_y = _texcoords(src_w, src_h, scale)
    xs = np.floor(tex_x * src_w).astype(np.intp)[None, :]
    ys = np.floor(tex_y * src_h).astype(np.intp)[:, None]
    return grid.load_clamped(xs, ys)


GRID_FUNCS = {
    GridAlgorithm.SUBPIXEL: lambda grid, scale, profile: grid_subpixel(grid, scale),
    GridAlgorithm.SMEAR: lambda grid, scale, profile: grid_smear(grid, scale, profile.bgr),
    GridAlgorithm.NONE: lambda grid, scale, profile: grid_none(grid, scale),
}


def apply_lcd_grid(grid, scale, algorithm, profile):
    """Возвращает RGB uint8 (src_h*scale, src_w*scale, 3)."""
    p = GRID_FUNCS[GridAlgorithm(algorithm)](grid, scale, profile)
    # SMEAR даёт значения за пределами [0,1]
    p = clamp01(p)
    p = color_correct(p, profile)
    return float_to_byte(to_gamma(p))


def apply_lcd_grid_filter(rgba, stride, scale, algorithm, profile, table):
    grid = downsample(rgba, stride, table)
    return apply_lcd_grid(grid, scale, algorithm, profile)
