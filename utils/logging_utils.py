# utils/logging_utils.py
import os
import datetime
import traceback
from colorama import init, Fore, Style

init(autoreset=True)

# Цвета
RESET = Style.RESET_ALL
BOLD = Style.BRIGHT
CYAN = Fore.CYAN
GREEN = Fore.GREEN
YELLOW = Fore.YELLOW
RED = Fore.RED
MAGENTA = Fore.MAGENTA
BLUE = Fore.BLUE

# === Пути ===
# создаются при первой записи, не при импорте
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
OUTPUT_DIR = os.path.join(BASE_DIR, "output_display_boy")
LOG_DIR = os.path.join(BASE_DIR, "logs")


def describe_config(config):
    """Строки отчёта о параметрах фильтра."""
    from emulator.filters import GRID_NAMES, GRID_PROFILES, mode_name
    from emulator.filters.mode_4_lcdgrid import GridAlgorithm

    lines = [f"Режим: {config.color_mode} ({mode_name(config.color_mode)})"]
    if config.color_mode in GRID_PROFILES:
        algorithm = GridAlgorithm.from_index(config.lcd_grid_mode)
        lines.append(f"Сетка LCD: {config.lcd_grid_mode} ({GRID_NAMES[algorithm]})")
    lines.append(f"Масштаб: {config.output_scale}")
    return lines


# === Логирование ошибок ===
def log_error(message: str, exc=None, image_path=None, config=None, log_dir=None):
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    now = datetime.datetime.now()
    log_path = os.path.join(log_dir, f"error_{now.strftime('%Y-%m-%d_%H-%M-%S-%f')}.log")

    lines = ["=== ОШИБКА ===", f"Время: {now}"]
    if image_path:
        lines.append(f"Файл: {image_path}")
    if config is not None:
        lines.extend(describe_config(config))
    lines.append(f"\nСообщение:\n{message}")
    if exc is not None:
        lines.append(f"\nТип: {type(exc).__name__}")
        lines.append(f"Аргументы: {exc.args}")
        lines.append("\nTraceback:")
        lines.append("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

    with open(log_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")

    print(f"{RED}\n[ОШИБКА] Лог: {log_path}{RESET}")
    return log_path
