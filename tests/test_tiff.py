"""Unit tests for contentstore.documents.tiff — Wang annotation tag detection."""

import io
import struct

import pytest
from PIL import Image

from contentstore.documents.tiff import WANG_ANNOTATION_TAG, has_tiff_tag_annotations

from helpers import build_tiff


def _encode(image_format: str, **params) -> bytes:
    buffer = io.BytesIO()
    Image.new("1", (4, 4)).save(buffer, format=image_format, **params)
    return buffer.getvalue()


class TestTiffTagDetection:

    @pytest.mark.parametrize("byte_order", ["II", "MM"])
    def test_tag_on_first_page(self, byte_order):
        assert has_tiff_tag_annotations(build_tiff([True], byte_order))

    @pytest.mark.parametrize("byte_order", ["II", "MM"])
    def test_tag_on_later_page(self, byte_order):
        assert has_tiff_tag_annotations(build_tiff([False, False, True], byte_order))

    def test_no_tag(self):
        assert not has_tiff_tag_annotations(build_tiff([False, False]))

    def test_tag_written_by_pillow(self):
        data = _encode("TIFF", tiffinfo={WANG_ANNOTATION_TAG: b"WANG"})
        assert has_tiff_tag_annotations(data)

    def test_plain_pillow_tiff(self):
        assert not has_tiff_tag_annotations(_encode("TIFF"))

    def test_other_image_format(self):
        assert not has_tiff_tag_annotations(_encode("PNG"))

    @pytest.mark.parametrize("data", [None, b"", b"%PDF-1.7\n", b"II*", b"II\x2b\x00\x08\x00\x00\x00"])
    def test_not_tiff(self, data):
        assert not has_tiff_tag_annotations(data)

    def test_truncated(self):
        data = build_tiff([True])
        assert not has_tiff_tag_annotations(data[:14])

    def test_cyclic_directory_chain(self):
        data = bytearray(build_tiff([False]))
        (first_ifd,) = struct.unpack_from("<I", data, 4)
        # point the only IFD's next offset back at itself
        data[-4:] = struct.pack("<I", first_ifd)
        assert not has_tiff_tag_annotations(bytes(data))
