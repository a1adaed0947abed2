"""
File-level conversion: decode a PNG with Pillow, build the .ico in memory
and write it to disk in one step. Also converts every PNG in a directory.
"""

import os
import tempfile
from collections import namedtuple
from pathlib import Path

from PIL import Image

from .bitmap import MASK_OPAQUE, to_rgba
from .container import assemble
from .errors import DecodeError, IconError, WriteError
from .sizes import ICON_SIZES

ConversionResult = namedtuple('ConversionResult', ['input_path', 'output_path', 'error'])


def load_image(path):
    """Open and fully decode an image as RGBA."""
    try:
        with Image.open(path) as img:
            img.load()
            # Ensure RGBA for transparency
            if img.mode != 'RGBA':
                return to_rgba(img)
            return img.copy()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to decode image: {e}", path=path) from e


def write_icon(data, path):
    """Write bytes to path atomically; no partial file is left on failure."""
    path = Path(path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.",
                                         suffix='.tmp', delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise WriteError(f"Failed to write icon: {e}", path=path) from e


def create_ico(input_path, output_path, sizes=ICON_SIZES, mask_policy=MASK_OPAQUE):
    """Convert one image file to a multi-resolution .ico file."""
    image = load_image(input_path)
    try:
        data = assemble(image, sizes, mask_policy)
    except IconError as e:
        if e.path is None:
            e.path = input_path
        raise
    write_icon(data, output_path)
    return len(data)


def find_png_files(input_dir):
    """All *.png files directly inside input_dir, sorted by name."""
    return sorted(Path(input_dir).glob('*.png'))


def output_path_for(input_path, output_dir):
    return Path(output_dir) / (Path(input_path).stem + '.ico')


def convert_directory(input_dir, output_dir, sizes=ICON_SIZES,
                      mask_policy=MASK_OPAQUE, log=None):
    """Convert every PNG in input_dir into output_dir.

    A failing file is recorded in its result and the remaining files are
    still converted. log, if given, receives one progress message at a time.
    """
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Failed to create output directory: {e}", path=output_dir) from e

    results = []
    for input_path in find_png_files(input_dir):
        output_path = output_path_for(input_path, output_dir)
        if log:
            log(f"Processing {input_path}...")
        try:
            create_ico(input_path, output_path, sizes, mask_policy)
        except IconError as e:
            if log:
                log(f"Failed to create ICO for {input_path}: {e}")
            results.append(ConversionResult(input_path, output_path, e))
        else:
            if log:
                log(f"Created {output_path}")
            results.append(ConversionResult(input_path, output_path, None))

    return results
