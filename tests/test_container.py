import io
import struct

import pytest
from PIL import Image

from png2ico.bitmap import MASK_ALPHA, decode_bitmap_header, encode_bitmap
from png2ico.container import (
    assemble, build_icon, describe_icon, entry_data, read_directory, resize_variants,
)
from png2ico.errors import EncodeError
from png2ico.sizes import ICON_SIZES


def red_image(size=64):
    return Image.new('RGBA', (size, size), (255, 0, 0, 255))


def expected_length(sizes):
    return 6 + 16 * len(sizes) + sum(40 + 4 * s * s + s * s for s in sizes)


def test_header():
    data = assemble(red_image())
    reserved, ico_type, count = struct.unpack('<HHH', data[:6])
    assert reserved == 0
    assert ico_type == 1
    assert count == 6


def test_end_to_end_length():
    data = assemble(red_image())
    assert len(data) == expected_length(ICON_SIZES)


def test_directory_entries():
    data = assemble(red_image())
    entries = read_directory(data)

    assert len(entries) == len(ICON_SIZES)
    for entry, size in zip(entries, ICON_SIZES):
        expected = 0 if size >= 256 else size
        assert entry.width == expected
        assert entry.height == expected
        assert entry.color_count == 0
        assert entry.reserved == 0
        assert entry.planes == 1
        assert entry.bit_count == 32


def test_offsets_address_each_variant():
    image = red_image()
    data = assemble(image)
    entries = read_directory(data)

    payload_start = 6 + 16 * len(entries)
    assert entries[0].offset == payload_start

    for entry, variant in zip(entries, resize_variants(image)):
        bitmap, mask = encode_bitmap(variant, *variant.size)
        assert entry.size == len(bitmap) + len(mask)
        assert entry_data(data, entry) == bitmap + mask

    for previous, entry in zip(entries, entries[1:]):
        assert previous.offset + previous.size == entry.offset

    assert entries[-1].offset + entries[-1].size == len(data)


def test_embedded_bitmap_headers():
    data = assemble(red_image())
    for entry, size in zip(read_directory(data), ICON_SIZES):
        header = decode_bitmap_header(entry_data(data, entry))
        assert header['width'] == size
        assert header['height'] == size * 2
        assert header['bit_count'] == 32
        assert header['compression'] == 0


def test_default_masks_are_zero():
    image = Image.new('RGBA', (32, 32), (0, 0, 0, 0))
    data = assemble(image, sizes=(16,))
    entry = read_directory(data)[0]
    mask = entry_data(data, entry)[40 + 16 * 16 * 4:]
    assert mask == bytes(16 * 16)


def test_alpha_mask_policy():
    image = Image.new('RGBA', (16, 16), (0, 0, 0, 0))
    data = assemble(image, sizes=(16,), mask_policy=MASK_ALPHA)
    entry = read_directory(data)[0]
    mask = entry_data(data, entry)[40 + 16 * 16 * 4:]
    assert mask == b'\x01' * (16 * 16)


def test_custom_sizes():
    data = assemble(red_image(), sizes=(16, 24))
    entries = read_directory(data)
    assert [e.width for e in entries] == [16, 24]
    assert len(data) == expected_length((16, 24))


def test_invalid_sizes_rejected():
    with pytest.raises(EncodeError):
        assemble(red_image(), sizes=(32, 16))


def test_build_icon_requires_images():
    with pytest.raises(EncodeError):
        build_icon([])


def test_build_icon_non_square():
    data = build_icon([Image.new('RGBA', (8, 4))])
    entry = read_directory(data)[0]
    assert (entry.width, entry.height) == (8, 4)
    assert entry.size == 40 + 8 * 4 * 4 + 8 * 4


def test_read_directory_rejects_non_icon():
    with pytest.raises(EncodeError):
        read_directory(struct.pack('<HHH', 0, 2, 1))
    with pytest.raises(EncodeError):
        read_directory(b'\x00\x00')
    with pytest.raises(EncodeError):
        read_directory(struct.pack('<HHH', 0, 1, 3))


def test_describe_icon():
    data = assemble(red_image(), sizes=(16, 256))
    lines = describe_icon(data)
    assert lines[0] == "16x16, 1,320 bytes, BMP"
    assert lines[1].startswith("256x256, ")
    assert lines[1].endswith(" BMP")


def test_pillow_reads_largest_image():
    data = assemble(red_image())
    with Image.open(io.BytesIO(data)) as ico:
        assert ico.format == 'ICO'
        assert ico.size == (256, 256)
        pixel = ico.convert('RGBA').getpixel((128, 128))
    r, g, b, a = pixel
    assert r >= 250 and g <= 5 and b <= 5
    assert a == 255
