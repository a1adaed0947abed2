"""
Encode one icon image as a 32-bit BGRA device-independent bitmap plus the
AND mask that follows it inside an .ico entry.
"""

import struct

from .errors import EncodeError

# BITMAPINFOHEADER is always 40 bytes
BITMAP_HEADER_SIZE = 40
BITS_PER_PIXEL = 32
BI_RGB = 0

# Every mask byte is 0, whatever the pixel's alpha (same mask as existing output)
MASK_OPAQUE = 'opaque'
# Mask byte is 1 where the pixel is less than half opaque
MASK_ALPHA = 'alpha'

MASK_POLICIES = (MASK_OPAQUE, MASK_ALPHA)

ALPHA_THRESHOLD = 128


def bitmap_header(width, height):
    """Build the 40-byte BITMAPINFOHEADER for a width x height icon image."""
    return struct.pack('<IiiHHIIiiII',
        BITMAP_HEADER_SIZE,     # biSize
        width,                  # biWidth
        height * 2,             # biHeight (color rows + mask rows)
        1,                      # biPlanes
        BITS_PER_PIXEL,         # biBitCount
        BI_RGB,                 # biCompression
        width * height * 4,     # biSizeImage
        0, 0,                   # biXPelsPerMeter, biYPelsPerMeter
        0, 0                    # biClrUsed, biClrImportant
    )


def to_rgba(image):
    """Convert any Pillow image to RGBA, keeping the high byte of 16-bit grey."""
    if image.mode == 'RGBA':
        return image

    if image.mode == 'I' or image.mode.startswith('I;16'):
        # convert('L') clips values above 255; scale to the high byte first
        if image.mode != 'I':
            image = image.convert('I')
        image = image.point(lambda v: v * (1 / 256)).convert('L')

    return image.convert('RGBA')


def build_mask(image, policy=MASK_OPAQUE):
    """One mask byte per pixel, rows top to bottom."""
    width, height = image.size

    if policy == MASK_OPAQUE:
        # NOTE: ignores alpha, so transparent pixels are still marked visible
        return bytes(width * height)

    if policy == MASK_ALPHA:
        alpha = image.getchannel('A')
        return alpha.point(lambda a: 1 if a < ALPHA_THRESHOLD else 0).tobytes()

    raise EncodeError(f"Unknown mask policy: {policy!r}")


def encode_bitmap(image, width, height, mask_policy=MASK_OPAQUE):
    """Encode an image as (bitmap bytes, mask bytes) for an .ico entry.

    The bitmap is the BITMAPINFOHEADER followed by BGRA pixels, bottom row
    first. The mask holds width * height bytes as selected by mask_policy.
    """
    if width <= 0 or height <= 0:
        raise EncodeError(f"Icon dimensions must be positive, got {width}x{height}")
    if image.size != (width, height):
        raise EncodeError(
            f"Image is {image.size[0]}x{image.size[1]}, expected {width}x{height}")

    image = to_rgba(image)

    # Raw BGRA packing with a negative row step writes the bottom row first
    pixels = image.tobytes('raw', 'BGRA', 0, -1)

    mask = build_mask(image, mask_policy)

    return bitmap_header(width, height) + pixels, mask


def decode_bitmap_header(data):
    """Unpack a BITMAPINFOHEADER into a dict of its fields."""
    if len(data) < BITMAP_HEADER_SIZE:
        raise EncodeError(f"Bitmap header needs {BITMAP_HEADER_SIZE} bytes, got {len(data)}")

    (size, width, height, planes, bit_count, compression, size_image,
     x_ppm, y_ppm, clr_used, clr_important) = struct.unpack(
        '<IiiHHIIiiII', data[:BITMAP_HEADER_SIZE])

    return {
        'size': size,
        'width': width,
        'height': height,
        'planes': planes,
        'bit_count': bit_count,
        'compression': compression,
        'size_image': size_image,
        'x_pels_per_meter': x_ppm,
        'y_pels_per_meter': y_ppm,
        'colors_used': clr_used,
        'colors_important': clr_important,
    }


def is_bitmap(data):
    """True when an entry payload starts with a BITMAPINFOHEADER rather than PNG."""
    return not data.startswith(b'\x89PNG') and len(data) >= 4 and \
        struct.unpack('<I', data[:4])[0] == BITMAP_HEADER_SIZE

