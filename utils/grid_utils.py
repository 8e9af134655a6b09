# utils/grid_utils.py
import numpy as np


class PixelGrid:
    """
    Прямоугольный буфер (height, width[, channels]) в линейном свете.
    load() за пределами сетки возвращает 0, load_clamped() прижимает координаты к краю.
    """

    def __init__(self, data):
        self.data = data

    @property
    def width(self):
        return self.data.shape[1]

    @property
    def height(self):
        return self.data.shape[0]

    @property
    def shape(self):
        return self.data.shape

    def load(self, xs, ys):
        # xs и ys: целочисленные массивы, которые broadcast'ятся друг с другом
        xs, ys = np.broadcast_arrays(np.asarray(xs, dtype=np.intp), np.asarray(ys, dtype=np.intp))
        inside = (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        values = self.data[np.clip(ys, 0, self.height - 1), np.clip(xs, 0, self.width - 1)]
        if values.ndim > inside.ndim:
            inside = inside[..., None]
        return np.where(inside, values, 0).astype(self.data.dtype, copy=False)

    def load_clamped(self, xs, ys):
        xs = np.clip(np.asarray(xs, dtype=np.intp), 0, self.width - 1)
        ys = np.clip(np.asarray(ys, dtype=np.intp), 0, self.height - 1)
        return self.data[ys, xs]


class BufferPair:
    """
    Пара буферов для пинг-понга: проход читает current, пишет в scratch, затем swap().
    На месте никогда не размываем.
    """

    def __init__(self, width, height, dtype=np.float32):
        self.current = np.zeros((height, width), dtype=dtype)
        self.scratch = np.zeros((height, width), dtype=dtype)

    @property
    def width(self):
        return self.current.shape[1]

    @property
    def height(self):
        return self.current.shape[0]

    def swap(self):
        self.current, self.scratch = self.scratch, self.current
        return self.current

    def take(self):
        """Забирает результат; пара получает новый чистый current."""
        result = self.current
        self.current = np.zeros_like(result)
        return result
