# utils/file_utils.py
import os
import time

IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.bmp', '.webp', '.gif', '.tif', '.tiff'}


def resolve_shortcut(path):
    """Ярлыки Windows (.lnk) разворачиваются в путь к файлу."""
    if not path.lower().endswith(".lnk"):
        return path
    try:
        import win32com.client
    except ImportError:
        print(f"[!] Ярлык: pywin32 не установлен, пропуск — {path}")
        return path
    shell = win32com.client.Dispatch("WScript.Shell")
    target = shell.CreateShortCut(path).Targetpath
    if target and os.path.exists(target):
        print(f"Ярлык → {target}")
        return target
    return path


def is_image(path):
    _, ext = os.path.splitext(path)
    return ext.lower() in IMAGE_EXTENSIONS


def make_output_dir(root, base_name, mode, scale):
    timestamp = time.strftime("%Y-%m-%d_%H-%M-%S")
    out_dir = os.path.join(root, f"{base_name}_{timestamp}_m{mode}_x{scale}")
    os.makedirs(out_dir, exist_ok=True)
    return out_dir
