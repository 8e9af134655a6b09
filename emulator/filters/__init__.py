# emulator/filters/__init__.py
from dataclasses import dataclass

from .mode_0_gbmono import MonoAdjustment, MonoDisplayProfile, apply_gbmono_filter
from .mode_4_lcdgrid import DisplayProfile, GridAlgorithm, apply_lcd_grid_filter
from .mode_8_crt import apply_crt_filter

# Монохромные палитры
GB = MonoDisplayProfile(
    foreground=(19.0 / 255.0, 74.0 / 255.0, 7.0 / 255.0), foreground_opacity=1.0,
    background=(170.0 / 255.0, 181.0 / 255.0, 19.0 / 255.0),
)
GB_POCKET = MonoDisplayProfile(
    foreground=(0.0 / 255.0, 0.0 / 255.0, 0.0 / 255.0), foreground_opacity=1.0,
    background=(164.0 / 255.0, 169.0 / 255.0, 137.0 / 255.0),
)
GB_LIGHT = MonoDisplayProfile(
    foreground=(0.0 / 255.0, 46.0 / 255.0, 44.0 / 255.0), foreground_opacity=1.0,
    background=(0.0 / 255.0, 181.0 / 255.0, 176.0 / 255.0),
)

# Профили Pokefan531
GBC = DisplayProfile(0.80, 0.275, -0.075, 0.135, 0.64, 0.225, 0.195, 0.155, 0.65, 0.93, 2.2, -0.5, False)
GBA = DisplayProfile(0.80, 0.275, -0.075, 0.135, 0.64, 0.225, 0.195, 0.155, 0.65, 0.93, 2.0, 0.5, True)
GBA_SP = DisplayProfile(0.86, 0.10, -0.06, 0.03, 0.745, 0.0675, 0.0025, -0.03, 1.0275, 0.97, 2.0, 0.0, False)
GBA_SP_WHITE = DisplayProfile(0.955, 0.11, -0.065, 0.0375, 0.885, 0.0775, 0.0025, -0.03, 1.0275, 0.94, 2.0, 0.0, False)

MONO_PROFILES = {0: GB, 1: GB_POCKET, 2: GB_LIGHT}
CUSTOM_MONO_MODE = 3
GRID_PROFILES = {4: GBC, 5: GBA, 6: GBA_SP, 7: GBA_SP_WHITE}
CRT_MODE = 8

MODE_NAMES = {
    0: "GB (DMG)",
    1: "GB Pocket",
    2: "GB Light",
    3: "GB (свои цвета)",
    4: "GBC",
    5: "GBA",
    6: "GBA SP",
    7: "GBA SP (белый)",
    8: "CRT",
}

GRID_NAMES = {
    GridAlgorithm.SUBPIXEL: "Субпиксели (SameBoy)",
    GridAlgorithm.SMEAR: "LCD Grid v2 (смаз)",
    GridAlgorithm.NONE: "Без сетки",
}


@dataclass(frozen=True)
class MonoMode:
    profile: MonoDisplayProfile
    adjustment: MonoAdjustment

    def apply(self, rgba, stride, scale, table):
        return apply_gbmono_filter(rgba, stride, self.profile, table, self.adjustment)


@dataclass(frozen=True)
class GridMode:
    profile: DisplayProfile
    algorithm: GridAlgorithm

    def apply(self, rgba, stride, scale, table):
        return apply_lcd_grid_filter(rgba, stride, scale, self.algorithm, self.profile, table)


@dataclass(frozen=True)
class CrtMode:
    def apply(self, rgba, stride, scale, table):
        return apply_crt_filter(rgba, stride, scale, table)


def get_filter(config):
    """
    Разбирает номер режима один раз: 0-3 монохром, 4-7 цветной LCD, дальше CRT.
    Возвращает MonoMode | GridMode | CrtMode.
    """
    mode = config.color_mode
    if mode < 0:
        raise ValueError(f"color mode must be non-negative, got {mode}")

    if mode in MONO_PROFILES:
        return MonoMode(MONO_PROFILES[mode], config.adjustment)
    if mode == CUSTOM_MONO_MODE:
        profile = MonoDisplayProfile(
            foreground=tuple(config.custom_foreground),
            foreground_opacity=config.custom_foreground_opacity,
            background=tuple(config.custom_background),
        )
        return MonoMode(profile, config.adjustment)
    if mode in GRID_PROFILES:
        profile = config.display_profile or GRID_PROFILES[mode]
        return GridMode(profile, GridAlgorithm.from_index(config.lcd_grid_mode))
    return CrtMode()


def mode_name(mode):
    return MODE_NAMES.get(mode, MODE_NAMES[CRT_MODE])
