"""
Build multi-resolution Windows .ico files with 32-bit BMP entries.
"""

from .bitmap import MASK_ALPHA, MASK_OPAQUE, encode_bitmap
from .container import IconDirEntry, assemble, build_icon, read_directory
from .convert import convert_directory, create_ico
from .errors import DecodeError, EncodeError, IconError, WriteError
from .sizes import ICON_SIZES, clamp_dimension, validate_sizes

__version__ = '1.0.0'
