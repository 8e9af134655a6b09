import numpy as np
import pytest

from utils.color_utils import (
    LinearColor,
    LinearTable,
    approximately_equal,
    clamp01,
    float_to_byte,
    hex_to_bytes,
    lerp,
    to_gamma,
    to_linear,
)


def test_transfer_endpoints():
    assert to_linear(0.0) == 0.0
    assert to_linear(1.0) == pytest.approx(1.0)
    assert to_gamma(0.0) == 0.0
    assert to_gamma(1.0) == pytest.approx(1.0)


def test_transfer_linear_segment():
    assert to_linear(0.04) == pytest.approx(0.04 / 12.92)
    assert to_gamma(0.003) == pytest.approx(0.003 * 12.92)


def test_transfer_round_trip_on_array():
    v = np.linspace(0.0, 1.0, 33)
    assert np.allclose(to_gamma(to_linear(v)), v, atol=1e-9)


def test_scalar_input_gives_python_float():
    assert isinstance(to_linear(0.5), float)
    assert isinstance(float_to_byte(0.5), int)


def test_float_to_byte_floors():
    assert float_to_byte(0.0) == 0
    assert float_to_byte(0.5) == 128
    assert float_to_byte(1.0 / 256.0 - 1e-9) == 0
    assert float_to_byte(0.999) == 255
    assert float_to_byte(1.0) == 255
    assert float_to_byte(1.7) == 255
    assert float_to_byte(-0.2) == 0


def test_float_to_byte_array_dtype():
    out = float_to_byte(np.array([0.0, 0.25, 1.0]))
    assert out.dtype == np.uint8
    assert list(out) == [0, 64, 255]


def test_linear_table():
    table = LinearTable()
    assert len(table) == 256
    assert table[0] == 0.0
    assert table[255] == pytest.approx(1.0)
    assert table[128] == pytest.approx(to_linear(128 / 255.0))
    with pytest.raises(ValueError):
        table.values[0] = 1.0


def test_linear_table_uses_high_byte_of_16bit_samples():
    table = LinearTable()
    samples = np.array([0, 0x00FF, 0x8000, 0x80FF, 0xFFFF], dtype=np.uint16)
    out = table.linearize(samples)
    assert out[0] == 0.0
    assert out[1] == 0.0
    assert out[2] == out[3] == table[0x80]
    assert out[4] == table[255]


def test_helpers():
    assert approximately_equal(1.5, 1.5005)
    assert not approximately_equal(1.5, 1.502)
    assert lerp(2.0, 4.0, 0.25) == 2.5
    assert list(clamp01(np.array([-1.0, 0.5, 2.0]))) == [0.0, 0.5, 1.0]


def test_linear_color_arithmetic():
    a = LinearColor(0.1, 0.2, 0.3)
    b = LinearColor.gray(0.5)
    assert (a + b).r == pytest.approx(0.6)
    assert (b - a).b == pytest.approx(0.2)
    assert (a * 2).g == pytest.approx(0.4)
    assert (2 * a).g == pytest.approx(0.4)
    assert (a / 2).r == pytest.approx(0.05)
    assert (-a).b == pytest.approx(-0.3)
    assert (b ** 2).r == pytest.approx(0.25)
    assert a.lerp(b, 0.5).r == pytest.approx(0.3)


def test_linear_color_conversions():
    white = LinearColor.from_hex("#FFFFFF")
    assert white.r == pytest.approx(1.0)
    assert white.luminance() == pytest.approx(1.0)
    assert LinearColor(1.5, -0.5, 0.5).clamp01() == LinearColor(1.0, 0.0, 0.5)
    assert LinearColor.from_bytes(170, 181, 19).to_bytes() == (170, 181, 19)
    assert np.allclose(LinearColor.from_array([0.1, 0.2, 0.3]).as_array(), [0.1, 0.2, 0.3])


def test_linear_color_bad_hex():
    with pytest.raises(ValueError):
        LinearColor.from_hex("#FFF")


def test_linear_color_sqrt_and_exp_do_not_raise():
    # арифметика может временно выйти за [0,1]; sqrt отрицательного канала даёт NaN
    c = LinearColor(-1.0, 0.0, 4.0).sqrt()
    assert np.isnan(c.r)
    assert c.g == 0.0
    assert c.b == 2.0
    e = LinearColor(0.0, 1.0, 1000.0).exp()
    assert e.r == 1.0
    assert e.g == pytest.approx(np.e)
    assert np.isinf(e.b)


def test_hex_to_bytes():
    assert hex_to_bytes("#134a07") == (19, 74, 7)
    assert hex_to_bytes(" FFFFFF ") == (255, 255, 255)
    for bad in ("#FFF", "0x12ab", "#GGGGGG", "", None):
        with pytest.raises(ValueError):
            hex_to_bytes(bad)
    assert LinearColor.from_hex("#134a07") == LinearColor.from_bytes(19, 74, 7)


def test_to_linear_matches_table_arithmetic():
    # нижний участок кривой: умножение на 1/12.92, как при построении таблицы
    v = 10 / 255.0
    assert to_linear(v) == v * (1.0 / 12.92)
    assert LinearTable()[10] == v * (1.0 / 12.92)
