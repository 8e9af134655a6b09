# utils/__init__.py
from .logging_utils import log_error, describe_config, RED, GREEN, YELLOW, CYAN, MAGENTA, BLUE, BOLD, RESET
from .color_utils import LinearColor, LinearTable, clamp01, float_to_byte, hex_to_bytes, lerp, to_gamma, to_linear
from .grid_utils import BufferPair, PixelGrid
from .file_utils import is_image, make_output_dir, resolve_shortcut
from .input_utils import ask_int, ask_float, ask_hex_color, parse_hex_color, parse_int_list, print_progress
from .palette_utils import show_palette, save_palette_image
