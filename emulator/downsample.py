# emulator/downsample.py
import math

import numpy as np

from utils.grid_utils import PixelGrid

# Рамка вокруг CRT-кадра, в пикселях устройства
CRT_MARGIN = 4
CRT_FRAME_HEIGHT = 240
SNES_MIN_HEIGHT = 224


def premultiply_rgba(rgba):
    """
    RGBA uint8 -> 16-битные RGB с premultiplied alpha: (c*257*a)//255.
    Прозрачные пиксели читаются как чёрные.
    """
    rgba = np.asarray(rgba)
    if rgba.ndim != 3 or rgba.shape[2] not in (3, 4):
        raise ValueError(f"expected (h, w, 3|4) pixel array, got shape {rgba.shape}")
    rgb = rgba[..., :3].astype(np.uint32) * 257
    if rgba.shape[2] == 3:
        return rgb.astype(np.uint16)
    alpha = rgba[..., 3:4].astype(np.uint32)
    return (rgb * alpha // 255).astype(np.uint16)


def scaled_buffer_size(width, height, stride):
    return int(math.ceil(width / stride)), int(math.ceil(height / stride))


def crt_frame_margins(src_width, src_height, stride):
    """
    Поля для CRT: SNES-кадр высотой 224..239 дополняется до 240 строк,
    плюс рамка CRT_MARGIN пикселей устройства со всех сторон.
    Возвращает (left, top, frame_width, frame_height) в пикселях исходника.
    """
    top = 0
    height = src_height
    if SNES_MIN_HEIGHT <= src_height < CRT_FRAME_HEIGHT:
        top = (CRT_FRAME_HEIGHT - src_height) // 2
        height = CRT_FRAME_HEIGHT

    margin = CRT_MARGIN * stride
    return margin, top + margin, src_width + margin * 2, height + margin * 2


def downsample(rgba, stride, table, left_margin=0, top_margin=0, width=None, height=None):
    """
    Линеаризует и прореживает исходник до разрешения устройства (без усреднения).
    Пиксель (tx, ty) берётся из (tx*stride - left_margin, ty*stride - top_margin);
    всё, что за пределами исходника, чёрное.
    """
    samples = premultiply_rgba(rgba)
    src_h, src_w = samples.shape[:2]
    if width is None:
        width = src_w
    if height is None:
        height = src_h

    target_w, target_h = scaled_buffer_size(width, height, stride)
    xs = np.arange(target_w) * stride - left_margin
    ys = np.arange(target_h) * stride - top_margin

    source = PixelGrid(table.linearize(samples))
    return PixelGrid(source.load(xs[None, :], ys[:, None]))
