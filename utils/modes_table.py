# utils/modes_table.py
from emulator.filters import CRT_MODE, CUSTOM_MONO_MODE, GRID_NAMES, GRID_PROFILES, MODE_NAMES, MONO_PROFILES
from .logging_utils import BOLD, CYAN, MAGENTA, RESET, YELLOW


def mode_family(mode):
    if mode in MONO_PROFILES or mode == CUSTOM_MONO_MODE:
        return "Монохром"
    if mode in GRID_PROFILES:
        return "Цветной LCD"
    return "CRT"


def show_modes_table():
    print(f"{BOLD}{CYAN}Режимы:{RESET}")
    for mode in range(CRT_MODE + 1):
        print(f"  {YELLOW}{mode:>2}{RESET}  {MODE_NAMES[mode]:<18} {MAGENTA}{mode_family(mode)}{RESET}")
    print(f"{BOLD}{CYAN}Сетка LCD (для режимов 4-7):{RESET}")
    for algorithm, name in GRID_NAMES.items():
        print(f"  {YELLOW}{int(algorithm):>2}{RESET}  {name}")
    print()
