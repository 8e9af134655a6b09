import tkinter as tk
from tkinter import filedialog
from .logging_utils import log_error, CYAN, RESET


def select_images_via_dialog(multi=False):
    root = None
    try:
        root = tk.Tk(); root.withdraw(); root.update()
        print(f"{CYAN}Выбор скриншотов...{RESET}")

        file_types = [
            ("Images", "*.png *.jpg *.jpeg *.bmp *.webp *.gif *.tiff"),
            ("All files", "*.*")
        ]

        if multi:
            paths = filedialog.askopenfilenames(title="Выберите скриншоты", filetypes=file_types)
            return list(paths)
        path = filedialog.askopenfilename(title="Выберите скриншот", filetypes=file_types)
        return [path] if path else []
    except tk.TclError as e:
        # нет дисплея, значит ничего не выбрано
        log_error("Диалог", e)
        return []
    finally:
        if root is not None:
            root.destroy()
