# utils/input_utils.py
from .color_utils import hex_to_bytes
from .logging_utils import YELLOW, RED, GREEN, RESET


def print_progress(step, total_steps=5, prefix=""):
    percent = step / total_steps * 100
    bar_len = 20
    filled = int(bar_len * step // total_steps)
    bar = f"{GREEN}{'█' * filled}{RESET}{'.' * (bar_len - filled)}"
    print(f"\r{prefix}{bar} {YELLOW}{percent:3.0f}%{RESET}", end="", flush=True)


def ask_int(prompt, min_v, max_v, default=None):
    while True:
        text = input(f"{YELLOW}{prompt}{RESET}").strip()
        if not text and default is not None:
            return default
        try:
            v = int(text)
        except ValueError:
            print(f"{RED}Целое число!{RESET}")
            continue
        if min_v <= v <= max_v: return v
        print(f"{RED}От {min_v} до {max_v}.{RESET}")


def ask_float(prompt, min_v, max_v, default=None):
    while True:
        text = input(f"{YELLOW}{prompt}{RESET}").strip()
        if not text and default is not None:
            return default
        try:
            v = float(text)
        except ValueError:
            print(f"{RED}Число!{RESET}")
            continue
        if min_v <= v <= max_v: return v
        print(f"{RED}От {min_v} до {max_v}.{RESET}")


def parse_hex_color(text):
    """
    '#RRGGBB' или 'RRGGBB' -> (r, g, b) в [0,1], гамма-кодированные.
    Возвращает None при некорректном вводе.
    """
    try:
        r, g, b = hex_to_bytes(text)
    except ValueError:
        return None
    return r / 255.0, g / 255.0, b / 255.0


def ask_hex_color(prompt, default=None):
    while True:
        text = input(f"{YELLOW}{prompt}{RESET}").strip()
        if not text and default is not None:
            return default
        color = parse_hex_color(text)
        if color is not None:
            return color
        print(f"{RED}Формат: #RRGGBB{RESET}")


def parse_int_list(text, min_v, max_v):
    """
    Разбирает ввод пользователя:
    '3,5,7' -> [3,5,7]
    '2-5' -> [2,3,4,5]
    'all' -> полный диапазон
    Значения вне диапазона и мусор пропускаются.
    """
    text = (text or "").strip().lower()

    if text == "all":
        return list(range(min_v, max_v + 1))

    result = set()
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        if "-" in part:
            try:
                start, end = map(int, part.split("-", 1))
            except ValueError:
                continue
            for i in range(start, end + 1):
                if min_v <= i <= max_v:
                    result.add(i)
        else:
            try:
                val = int(part)
            except ValueError:
                continue
            if min_v <= val <= max_v:
                result.add(val)
    return sorted(result)
