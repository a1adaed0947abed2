"""
Assemble a multi-resolution Windows .ico from a single source image.

Layout: 6-byte header, one 16-byte directory entry per image, then each
image's bitmap and mask in directory order.
"""

import struct
from collections import namedtuple

from PIL import Image

from .bitmap import MASK_OPAQUE, BITS_PER_PIXEL, encode_bitmap, is_bitmap, to_rgba
from .errors import EncodeError
from .sizes import ICON_SIZES, clamp_dimension, validate_sizes

ICO_HEADER_SIZE = 6
ICO_DIR_ENTRY_SIZE = 16
ICO_TYPE_ICON = 1

IconDirEntry = namedtuple('IconDirEntry', [
    'width', 'height', 'color_count', 'reserved',
    'planes', 'bit_count', 'size', 'offset',
])


def resize_variants(image, sizes=ICON_SIZES, resample=Image.Resampling.LANCZOS):
    """Resize the source to every icon size, smallest first."""
    try:
        sizes = validate_sizes(sizes)
    except ValueError as e:
        raise EncodeError(str(e)) from e

    image = to_rgba(image)

    variants = []
    for size in sizes:
        try:
            variants.append(image.resize((size, size), resample))
        except (OSError, ValueError) as e:
            raise EncodeError(f"Failed to resize to {size}x{size}: {e}") from e

    return variants


def build_icon(variants, mask_policy=MASK_OPAQUE):
    """Serialize already-resized images into .ico bytes."""
    if not variants:
        raise EncodeError("An icon needs at least one image")

    # ICO header: Reserved (2) + Type (2) + Count (2)
    ico_header = struct.pack('<HHH', 0, ICO_TYPE_ICON, len(variants))

    current_offset = ICO_HEADER_SIZE + ICO_DIR_ENTRY_SIZE * len(variants)

    directory_data = bytearray()
    images_data = bytearray()

    for image in variants:
        width, height = image.size
        bitmap, mask = encode_bitmap(image, width, height, mask_policy)
        data_size = len(bitmap) + len(mask)

        directory_data.extend(struct.pack('<BBBBHHII',
            clamp_dimension(width),     # Width (0 = 256)
            clamp_dimension(height),    # Height (0 = 256)
            0,                          # Color count (0 = true color)
            0,                          # Reserved
            1,                          # Color planes
            BITS_PER_PIXEL,             # Bits per pixel
            data_size,                  # Size of bitmap + mask
            current_offset              # Offset to bitmap
        ))

        images_data.extend(bitmap)
        images_data.extend(mask)
        current_offset += data_size

    return bytes(ico_header + directory_data + images_data)


def assemble(image, sizes=ICON_SIZES, mask_policy=MASK_OPAQUE,
             resample=Image.Resampling.LANCZOS):
    """Create .ico bytes holding the image at every configured size."""
    variants = resize_variants(image, sizes, resample)
    return build_icon(variants, mask_policy)


def read_directory(data):
    """Parse the header and directory of .ico bytes.

    Returns the entries in file order as IconDirEntry tuples.
    """
    if len(data) < ICO_HEADER_SIZE:
        raise EncodeError(f"Icon data too short for a header: {len(data)} bytes")

    reserved, ico_type, count = struct.unpack('<HHH', data[:ICO_HEADER_SIZE])
    if reserved != 0 or ico_type != ICO_TYPE_ICON:
        raise EncodeError(f"Not an icon file (reserved={reserved}, type={ico_type})")

    directory_end = ICO_HEADER_SIZE + ICO_DIR_ENTRY_SIZE * count
    if len(data) < directory_end:
        raise EncodeError(f"Icon directory truncated: {count} entries need {directory_end} bytes")

    entries = []
    offset = ICO_HEADER_SIZE
    for _ in range(count):
        entries.append(IconDirEntry._make(
            struct.unpack('<BBBBHHII', data[offset:offset + ICO_DIR_ENTRY_SIZE])))
        offset += ICO_DIR_ENTRY_SIZE

    return entries


def entry_data(data, entry):
    """Bytes addressed by one directory entry."""
    return data[entry.offset:entry.offset + entry.size]


def describe_icon(data):
    """One summary line per image, e.g. '16x16, 1,320 bytes, BMP'."""
    lines = []
    for entry in read_directory(data):
        display_width = 256 if entry.width == 0 else entry.width
        display_height = 256 if entry.height == 0 else entry.height
        format_type = "BMP" if is_bitmap(entry_data(data, entry)) else "PNG"
        lines.append(f"{display_width}x{display_height}, {entry.size:,} bytes, {format_type}")
    return lines
