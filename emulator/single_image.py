import os
import time

import numpy as np
from PIL import Image, ImageOps

from emulator.converter import convert_pixels, detect_device, load_image
from emulator.filters import GridMode, MonoMode, get_filter, mode_name
from emulator.filters.mode_4_lcdgrid import color_correct
from utils.color_utils import float_to_byte, to_gamma, to_linear
from utils.file_utils import make_output_dir, resolve_shortcut
from utils.input_utils import print_progress
from utils.logging_utils import GREEN, OUTPUT_DIR, RESET, YELLOW, describe_config, log_error
from utils.palette_utils import save_palette_image

# R, G, B и белый через профиль панели
PANEL_SWATCHES = np.array([
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
    [1.0, 1.0, 1.0],
])


def profile_palette(mode):
    """Цвета для образца палитры: fg/bg у монохрома, чистые цвета через профиль у LCD."""
    if isinstance(mode, MonoMode):
        fg = float_to_byte(np.asarray(mode.profile.foreground))
        bg = float_to_byte(np.asarray(mode.profile.background))
        return [tuple(int(c) for c in fg), tuple(int(c) for c in bg)]
    if isinstance(mode, GridMode):
        out = float_to_byte(to_gamma(color_correct(to_linear(PANEL_SWATCHES), mode.profile)))
        return [tuple(int(c) for c in rgb) for rgb in out]
    return []


def process_single(image_path, config, table, out_dir=None, return_report=True):
    """
    Обрабатывает один скриншот: фильтр, сохранение результата, палитры, сравнения и отчёта.
    Ошибки логируются и возвращаются как {"error": ...}.
    """
    try:
        path = resolve_shortcut(image_path)
        base_name = os.path.splitext(os.path.basename(path))[0]
        if out_dir is None:
            out_dir = make_output_dir(OUTPUT_DIR, base_name, config.color_mode, config.output_scale)
        os.makedirs(out_dir, exist_ok=True)

        print_progress(1, prefix="Загрузка... ")
        start_time = time.time()
        with open(path, "rb") as f:
            pixels = load_image(f.read())
        h, w = pixels.shape[:2]
        device, stride = detect_device(w, h)

        print_progress(2, prefix=f"{mode_name(config.color_mode)}... ")
        out = convert_pixels(pixels, config, table)

        print_progress(4, prefix="Сохранение... ")
        duration = time.time() - start_time
        art_path = os.path.join(out_dir, f"{base_name}_m{config.color_mode}.png")
        Image.fromarray(out).save(art_path)

        palette = profile_palette(get_filter(config))
        palette_path = save_palette_image(palette, base_name, out_dir)
        compare_path = create_compare(path, art_path, out_dir, base_name)

        report_path = None
        if return_report:
            report_path = os.path.join(out_dir, f"{base_name}_report.txt")
            with open(report_path, "w", encoding="utf-8") as f:
                f.write("=== DisplayBoy ===\n")
                f.write(f"Исходный файл: {path}\n")
                f.write(f"Дата: {time.strftime('%Y-%m-%d %H:%M:%S')}\n\n")
                f.write(f"Размер: {w}x{h}\n")
                f.write(f"Устройство: {device or 'не определено'} (кратность {stride})\n")
                for line in describe_config(config):
                    f.write(f"{line}\n")
                f.write(f"Результат: {out.shape[1]}x{out.shape[0]}\n")
                f.write(f"Время выполнения: {duration:.2f} сек\n")
                if palette:
                    f.write("\nПалитра (RGB):\n")
                    for color in palette:
                        f.write(f" {color}\n")

        print_progress(5, prefix="Готово! ")
        print(f"\n{GREEN}Сохранено:{RESET}")
        if device:
            print(f" Устройство: {YELLOW}{device}{RESET} x{stride}")
        print(f" Результат: {art_path}")
        print(f" Палитра: {palette_path}")
        print(f" Отчёт: {report_path}")
        print(f" Сравнение: {compare_path}")

        return {
            "out_path": art_path,
            "palette_path": palette_path,
            "report_path": report_path,
            "compare_path": compare_path,
            "duration": duration,
            "size": (out.shape[1], out.shape[0]),
        }

    except Exception as e:
        log_error("process_single", e, image_path, config)
        return {"error": str(e)}


def create_compare(original_path, result_path, out_dir, base_name):
    """Сравнение: оригинал увеличивается до высоты результата (NEAREST) и ставится слева."""
    with Image.open(original_path) as im:
        orig = ImageOps.exif_transpose(im).convert("RGB")
    with Image.open(result_path) as im:
        res = im.convert("RGB")

    ow, oh = orig.size
    rw, rh = res.size
    factor = max(1, rh // oh)
    orig = orig.resize((ow * factor, oh * factor), Image.Resampling.NEAREST)
    ow, oh = orig.size

    new_w = ow + rw
    new_h = max(oh, rh)
    compare = Image.new("RGB", (new_w, new_h), (0, 0, 0))
    compare.paste(orig, (0, (new_h - oh) // 2))
    compare.paste(res, (ow, (new_h - rh) // 2))

    compare_path = os.path.join(out_dir, f"{base_name}_compare.png")
    compare.save(compare_path)
    return compare_path
