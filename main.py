import os
import sys
import time
from utils.logging_utils import log_error, BOLD, BLUE, CYAN, GREEN, MAGENTA, RED, RESET, YELLOW
from utils.color_utils import LinearTable
from utils.file_utils import resolve_shortcut, is_image
from utils.input_utils import ask_int, ask_float, ask_hex_color, parse_int_list
from utils.modes_table import show_modes_table
from utils.palette_utils import show_palette
from emulator.converter import FilterConfig, MAX_SCALE
from emulator.filters import CRT_MODE, CUSTOM_MONO_MODE, GB, GRID_PROFILES, MonoAdjustment, mode_name
from emulator.single_image import process_single


def collect_paths(args):
    input_paths = []
    if args:
        raw_paths = args
    else:
        from utils.ui_utils import select_images_via_dialog
        raw_paths = select_images_via_dialog(multi=True)
    for p in raw_paths:
        resolved = resolve_shortcut(p)
        if os.path.isfile(resolved) and is_image(resolved):
            input_paths.append(resolved)
        else:
            print(f"{YELLOW}Внимание: '{p}' → не найден или не изображение — пропущен.{RESET}")
    return input_paths


def ask_custom_colors():
    fg = ask_hex_color("Цвет пикселей #RRGGBB [#134A07]: ", GB.foreground)
    opacity = ask_int("Непрозрачность пикселей (0–100) [100]: ", 0, 100, 100) / 100.0
    bg = ask_hex_color("Цвет фона #RRGGBB [#AAB513]: ", GB.background)
    show_palette([tuple(round(c * 255) for c in fg), tuple(round(c * 255) for c in bg)], "Свои цвета")
    return fg, opacity, bg


def ask_adjustment():
    """Настройки квантования для монохромных режимов. Enter оставляет значения по умолчанию."""
    brightness = ask_float("Яркость (0.25–4) [1]: ", 0.25, 4.0, 1.0)
    contrast = ask_float("Контраст (0.25–4) [1]: ", 0.25, 4.0, 1.0)
    invert = ask_int("Инверсия (0/1) [0]: ", 0, 1, 0) == 1
    dither = ask_int("Дизеринг Байера (0/1) [0]: ", 0, 1, 0) == 1
    edges = ask_float("Усиление краёв (0–1) [0]: ", 0.0, 1.0, 0.0)
    return MonoAdjustment(brightness, contrast, invert, dither, edges)


def main():
    print(f"\n{BOLD}{BLUE}DISPLAY BOY — ЭМУЛЯЦИЯ ЭКРАНОВ GB / GBC / GBA / CRT{RESET}")
    print(f"{MAGENTA}{'=' * 40}{RESET}")
    show_modes_table()

    input_paths = collect_paths(sys.argv[1:])
    if not input_paths:
        print(f"{RED}Файлы не выбраны. Выход.{RESET}")
        return

    print(f"{CYAN}Выбрано:{RESET} {len(input_paths)} файл(ов)")
    for i, p in enumerate(input_paths, 1):
        print(f"  {i}. {os.path.basename(p)}")

    # --- Ввод параметров ---
    modes_input = input(f"{YELLOW}Режим (0–{CRT_MODE} или 'all', можно '0,4-7'): {RESET}").strip()
    modes_list = parse_int_list(modes_input, 0, CRT_MODE)
    if not modes_list:
        print(f"{RED}Режим не выбран. Выход.{RESET}")
        return

    lcd_grid_mode = 0
    if any(m in GRID_PROFILES for m in modes_list):
        lcd_grid_mode = ask_int("Сетка LCD (0 субпиксели, 1 смаз, 2 без сетки) [0]: ", 0, 2, 0)

    scale = ask_int(f"Масштаб вывода (1–{MAX_SCALE}) [4]: ", 1, MAX_SCALE, 4)

    fg, opacity, bg = GB.foreground, 1.0, GB.background
    if CUSTOM_MONO_MODE in modes_list:
        fg, opacity, bg = ask_custom_colors()

    adjustment = MonoAdjustment()
    if any(m <= CUSTOM_MONO_MODE for m in modes_list):
        adjustment = ask_adjustment()

    # таблица линеаризации строится один раз на весь запуск
    table = LinearTable()

    # --- Запуск обработки ---
    start_time = time.time()
    total_tasks = len(input_paths) * len(modes_list)
    current_task = 0
    failed = 0

    for idx_path, path in enumerate(input_paths, 1):
        print(f"\n{BOLD}{BLUE}>>> Файл {idx_path}/{len(input_paths)}: {os.path.basename(path)}{RESET}")
        for mode in modes_list:
            current_task += 1
            print(f"\n{MAGENTA}> Вариант {current_task}/{total_tasks}: {mode_name(mode)} x{scale}{RESET}")
            try:
                config = FilterConfig(
                    color_mode=mode,
                    lcd_grid_mode=lcd_grid_mode,
                    output_scale=scale,
                    custom_foreground=fg,
                    custom_foreground_opacity=opacity,
                    custom_background=bg,
                    adjustment=adjustment,
                )
            except ValueError as e:
                print(f"{RED}[Ошибка] {e}{RESET}")
                log_error(f"Параметры режима {mode}", e, path)
                failed += 1
                continue

            result = process_single(path, config, table)
            if "error" in result:
                print(f"{RED}[Ошибка] {result['error']}{RESET}")
                failed += 1

    total_time = time.time() - start_time
    mins, secs = divmod(int(total_time), 60)
    if failed:
        print(f"\n\n{YELLOW}Готово с ошибками: {failed}/{total_tasks}{RESET} ({mins} мин {secs} сек)")
    else:
        print(f"\n\n{GREEN}ВСЕ ЗАДАЧИ ВЫПОЛНЕНЫ!{RESET} ({mins} мин {secs} сек)")


if __name__ == "__main__":
    main()
