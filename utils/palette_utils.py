# utils/palette_utils.py
import os
from PIL import Image, ImageDraw
from .logging_utils import CYAN, RESET

SWATCH = 50
CAPTION = 14


def hex_code(rgb):
    r, g, b = map(int, rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def show_palette(palette, title="Палитра"):
    """Цвета профиля в терминале (truecolor) с hex-кодами."""
    print(f"\n{CYAN}{title}:{RESET}")
    for rgb in palette:
        r, g, b = map(int, rgb)
        print(f"\033[48;2;{r};{g};{b}m   \033[0m {hex_code(rgb)}", end="  ")
    print("\n")


def save_palette_image(palette, base_name, out_dir):
    """Образцы цветов с подписью hex под каждым. Для пустой палитры (CRT) None."""
    if not palette:
        return None
    img = Image.new("RGB", (len(palette) * SWATCH, SWATCH + CAPTION), (255, 255, 255))
    draw = ImageDraw.Draw(img)
    for i, rgb in enumerate(palette):
        x0 = i * SWATCH
        draw.rectangle([x0, 0, x0 + SWATCH - 1, SWATCH - 1], fill=tuple(map(int, rgb)))
        draw.text((x0 + 2, SWATCH + 1), hex_code(rgb), fill=(0, 0, 0))
    path = os.path.join(out_dir, f"{base_name}_palette.png")
    img.save(path)
    return path
