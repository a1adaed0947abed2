"""
Icon resolutions written into every .ico and the byte encoding of their
dimensions in the icon directory.
"""

# Windows icon sizes, smallest first. Directory entries follow this order.
ICON_SIZES = (16, 32, 48, 64, 128, 256)

# Largest dimension an icon directory entry can describe
MAX_ICON_SIZE = 256


def validate_sizes(sizes):
    """Check a size sequence and return it as a tuple.

    Sizes must be positive integers no larger than 256, strictly ascending.
    """
    sizes = tuple(sizes)
    if not sizes:
        raise ValueError("At least one icon size is required")

    previous = 0
    for size in sizes:
        if isinstance(size, bool) or not isinstance(size, int):
            raise ValueError(f"Icon size must be an integer, got {size!r}")
        if size <= 0 or size > MAX_ICON_SIZE:
            raise ValueError(f"Icon size {size} is outside 1..{MAX_ICON_SIZE}")
        if size <= previous:
            raise ValueError(f"Icon sizes must be strictly ascending: {sizes}")
        previous = size

    return sizes


def clamp_dimension(value):
    """Map a pixel dimension to its one-byte directory field.

    Dimensions below 256 are stored as-is; 256 (and anything larger) is
    stored as 0, which readers interpret as 256.
    """
    if value <= 0:
        raise ValueError(f"Icon dimension must be positive, got {value}")
    return value if value < MAX_ICON_SIZE else 0
