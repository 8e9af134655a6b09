# utils/color_utils.py
from dataclasses import dataclass

import numpy as np

# BT.709 luminance weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def to_linear(v):
    """sRGB -> линейный свет. Работает и со скалярами, и с массивами numpy."""
    v = np.asarray(v, dtype=np.float64)
    out = np.where(v <= 0.04045, v * (1.0 / 12.92), np.power((np.maximum(v, 0.0) + 0.055) / 1.055, 2.4))
    return out if out.ndim else float(out)


def to_gamma(v):
    """Линейный свет -> sRGB."""
    v = np.asarray(v, dtype=np.float64)
    out = np.where(v <= 0.0031308, v * 12.92, 1.055 * np.power(np.maximum(v, 0.0), 1.0 / 2.4) - 0.055)
    return out if out.ndim else float(out)


def float_to_byte(v):
    # floor(v*256), not round-to-nearest
    v = np.asarray(v, dtype=np.float64)
    out = np.where(v >= 1.0, 255.0, np.floor(np.maximum(v, 0.0) * 256.0)).astype(np.uint8)
    return out if out.ndim else int(out)


def clamp(v, low, high):
    return np.minimum(np.maximum(v, low), high)


def clamp01(v):
    return clamp(v, 0.0, 1.0)


def lerp(a, b, t):
    return a + (b - a) * t


def approximately_equal(a, b, tolerance=0.001):
    return abs(a - b) < tolerance


HEX_DIGITS = set("0123456789abcdefABCDEF")


def hex_to_bytes(text):
    """'#RRGGBB' или 'RRGGBB' -> (r, g, b) в 0..255."""
    text = (text or "").strip().lstrip("#")
    if len(text) != 6 or not set(text) <= HEX_DIGITS:
        raise ValueError(f"expected #RRGGBB, got {text!r}")
    value = int(text, 16)
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


class LinearTable:
    """
    Таблица линеаризации на 256 значений.
    Строится один раз и дальше только читается; передаётся по ссылке во все загрузки пикселей.
    """

    def __init__(self):
        table = to_linear(np.arange(256, dtype=np.float64) / 255.0)
        table.setflags(write=False)
        self._table = table

    @property
    def values(self):
        return self._table

    def __len__(self):
        return len(self._table)

    def __getitem__(self, index):
        return float(self._table[index])

    def linearize(self, samples):
        """uint8 индексируется напрямую, uint16 по старшим 8 битам."""
        samples = np.asarray(samples)
        if samples.dtype == np.uint8:
            return self._table[samples]
        return self._table[(samples.astype(np.uint32) >> 8) & 0xFF]


@dataclass(frozen=True)
class LinearColor:
    r: float
    g: float
    b: float

    @classmethod
    def gray(cls, v):
        return cls(v, v, v)

    @classmethod
    def from_array(cls, arr):
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    @classmethod
    def from_gamma(cls, r, g, b):
        """Из sRGB значений в [0,1]."""
        return cls(to_linear(r), to_linear(g), to_linear(b))

    @classmethod
    def from_bytes(cls, r, g, b):
        return cls.from_gamma(r / 255.0, g / 255.0, b / 255.0)

    @classmethod
    def from_hex(cls, text):
        return cls.from_bytes(*hex_to_bytes(text))

    def as_array(self):
        return np.array([self.r, self.g, self.b], dtype=np.float64)

    def _apply(self, other, op):
        if isinstance(other, LinearColor):
            return LinearColor(op(self.r, other.r), op(self.g, other.g), op(self.b, other.b))
        return LinearColor(op(self.r, other), op(self.g, other), op(self.b, other))

    def __add__(self, other):
        return self._apply(other, lambda a, b: a + b)

    def __sub__(self, other):
        return self._apply(other, lambda a, b: a - b)

    def __mul__(self, other):
        return self._apply(other, lambda a, b: a * b)

    __rmul__ = __mul__

    def __truediv__(self, other):
        return self._apply(other, lambda a, b: a / b)

    def __pow__(self, other):
        return self._apply(other, lambda a, b: a ** b)

    def __neg__(self):
        return LinearColor(-self.r, -self.g, -self.b)

    def _map(self, func):
        # отрицательный канал даёт NaN, а не исключение; переполнение exp даёт inf
        with np.errstate(invalid="ignore", over="ignore"):
            return LinearColor(*(float(func(c)) for c in (self.r, self.g, self.b)))

    def sqrt(self):
        return self._map(np.sqrt)

    def exp(self):
        return self._map(np.exp)

    def clamp01(self):
        return LinearColor(*(min(max(c, 0.0), 1.0) for c in (self.r, self.g, self.b)))

    def luminance(self):
        return self.r * LUMA_R + self.g * LUMA_G + self.b * LUMA_B

    def to_gamma(self):
        return LinearColor(to_gamma(self.r), to_gamma(self.g), to_gamma(self.b))

    def to_bytes(self):
        """Гамма-кодирование и перевод в 8 бит. Перед этим нужно сделать clamp01."""
        g = self.to_gamma()
        return (float_to_byte(g.r), float_to_byte(g.g), float_to_byte(g.b))

    def lerp(self, other, t):
        return self + (other - self) * t
