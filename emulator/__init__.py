# emulator/__init__.py
from .converter import (
    DecodeError,
    FilterConfig,
    OutputTooLargeError,
    convert_image,
    convert_pixels,
    detect_device,
    execute,
)
from .filters import MODE_NAMES, get_filter, mode_name
