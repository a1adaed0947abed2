"""
Convert every PNG in a directory into a multi-resolution Windows .ico.

Usage: png2ico -f input_dir -o output_dir [--alpha-mask] [--verify]
"""

import argparse
import sys

from .bitmap import MASK_ALPHA, MASK_OPAQUE
from .container import describe_icon
from .convert import convert_directory, find_png_files
from .errors import IconError
from .sizes import ICON_SIZES


def build_parser():
    parser = argparse.ArgumentParser(
        prog='png2ico',
        description="Convert .png files to multi-resolution .ico files")
    parser.add_argument('-f', '--input-dir', required=True, metavar='<dir>',
                        help="Directory containing .png files to convert to .ico")
    parser.add_argument('-o', '--output-dir', required=True, metavar='<dir>',
                        help="Output directory for .ico files")
    parser.add_argument('--alpha-mask', action='store_true',
                        help="Derive the AND mask from alpha instead of writing an all-visible mask")
    parser.add_argument('--verify', action='store_true',
                        help="Print the structure of each created .ico")
    return parser


def print_structure(path):
    """Print the directory of an .ico file."""
    with open(path, 'rb') as f:
        data = f.read()

    lines = describe_icon(data)
    print(f"  {path}: {len(lines)} images")
    for i, line in enumerate(lines, 1):
        print(f"    [{i}] {line}")


def main(argv=None):
    args = build_parser().parse_args(argv)

    if not find_png_files(args.input_dir):
        print("No PNG files found in the input directory.")
        return 2

    mask_policy = MASK_ALPHA if args.alpha_mask else MASK_OPAQUE

    try:
        results = convert_directory(args.input_dir, args.output_dir,
                                    ICON_SIZES, mask_policy, log=print)
    except IconError as e:
        print(f"Error: {e}")
        return 1

    failures = [r for r in results if r.error is not None]

    if args.verify:
        print("\nICO Structure:")
        for result in results:
            if result.error is None:
                try:
                    print_structure(result.output_path)
                except (OSError, IconError) as e:
                    print(f"Error: failed to read {result.output_path}: {e}")
                    return 1

    print("Conversion completed.")
    if failures:
        print(f"{len(failures)} of {len(results)} files failed.")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
