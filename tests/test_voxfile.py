import logging

import pytest

import voxreader
from voxreader.voxfile import ByteCursor, Chunk, decode_bytes, dict_get, read_dictionary

from voxbuilder import chunk, dictionary, int32, string, vox


def test_cursor_reads_little_endian():
    cursor = ByteCursor(int32(-1) + (150).to_bytes(4, "little") + b"\x07")
    assert cursor.read_int32() == -1
    assert cursor.read_uint32() == 150
    assert cursor.read_uint8() == 7
    assert cursor.at_end


def test_cursor_peek_does_not_advance():
    cursor = ByteCursor(b"nTRNrest")
    assert cursor.peek_bytes(4) == b"nTRN"
    assert cursor.position == 0
    assert cursor.read_bytes(4) == b"nTRN"
    assert cursor.remaining == 4


def test_cursor_fails_past_end():
    cursor = ByteCursor(b"\x01\x02")
    with pytest.raises(voxreader.TruncatedInput):
        cursor.read_int32()
    # a failed read does not move the cursor
    assert cursor.position == 0


def test_string_with_bad_length():
    with pytest.raises(voxreader.TruncatedInput):
        ByteCursor(int32(100) + b"short").read_string()
    with pytest.raises(voxreader.FormatError):
        ByteCursor(int32(-5) + b"short").read_string()


def test_string_keeps_undecodable_bytes():
    text = ByteCursor(int32(2) + b"\xff\xfe").read_string()
    assert text.encode("utf-8", "surrogateescape") == b"\xff\xfe"


def test_read_dictionary_keeps_order_and_duplicates():
    pairs = [("_name", "b"), ("_hidden", "0"), ("_name", "a")]
    buffer = b"junk" + dictionary(pairs) + b"tail"

    dict_, offset = read_dictionary(buffer, 4)

    assert dict_ == pairs
    assert buffer[offset:] == b"tail"
    assert dict_get(dict_, "_name") == "b"
    assert dict_get(dict_, "_missing", "x") == "x"


def test_read_dictionary_truncated():
    buffer = int32(2) + string("key") + string("value") + string("key2")
    with pytest.raises(voxreader.TruncatedInput):
        read_dictionary(buffer)


def test_chunk_without_children():
    chunk_bytes = chunk(b"SIZE", int32(1) + int32(2) + int32(3))
    cursor = ByteCursor(chunk_bytes + b"next")

    c = Chunk.read(cursor)

    assert c.id == b"SIZE"
    assert c.tag == "SIZE"
    assert c.content == int32(1) + int32(2) + int32(3)
    assert c.children == []
    assert cursor.position == len(chunk_bytes)


def test_chunk_nested_children():
    inner = chunk(b"LEAF", b"abc")
    middle = chunk(b"MIDL", b"12", inner + inner)
    outer = chunk(b"OUTR", b"", middle + chunk(b"LAST", b"z"))

    c = Chunk.read(ByteCursor(outer))

    assert [child.id for child in c.children] == [b"MIDL", b"LAST"]
    assert [child.content for child in c.children[0].children] == [b"abc", b"abc"]
    assert c.find(b"LAST")[0].content == b"z"
    assert c.find(b"NONE") == []


@pytest.mark.parametrize(
    "content, children",
    [
        (b"", b""),
        (b"x" * 7, b""),
        (b"", chunk(b"A___", b"1")),
        (b"abcd", chunk(b"A___", b"1", chunk(b"B___", b"22")) + chunk(b"C___")),
    ],
)
def test_chunk_consumes_declared_size(content, children):
    data = chunk(b"TEST", content, children)
    cursor = ByteCursor(data + b"trailing")

    c = Chunk.read(cursor)

    assert cursor.position == 12 + len(content) + len(children)
    assert c.size == cursor.position


def test_chunk_trusts_declared_children_size(caplog):
    # children really use 13 bytes but only 12 are declared
    data = chunk(b"OUTR", b"", chunk(b"KID_", b"x"), children_size=12)
    data += b"\x00" * 8

    with caplog.at_level(logging.WARNING):
        c = Chunk.read(ByteCursor(data))

    assert [child.id for child in c.children] == [b"KID_"]
    assert c.size == 24
    assert "declares 12 bytes of children" in caplog.text


@pytest.mark.parametrize("cut", [3, 8, 11, 14])
def test_chunk_truncated(cut):
    data = chunk(b"OUTR", b"abcd", chunk(b"KID_", b"x"))
    with pytest.raises(voxreader.TruncatedInput):
        Chunk.read(ByteCursor(data[:cut]))


def test_chunk_huge_declared_size_fails_fast():
    data = b"MAIN" + (0xFFFFFFF0).to_bytes(4, "little") + int32(0)
    with pytest.raises(voxreader.TruncatedInput):
        Chunk.read(ByteCursor(data))


def test_decode_bytes_header():
    version, main = decode_bytes(vox(chunk(b"PACK", int32(0))))
    assert version == 150
    assert main.id == b"MAIN"
    assert main.children[0].id == b"PACK"


def test_decode_bytes_bad_magic():
    with pytest.raises(voxreader.MagicMismatch):
        decode_bytes(vox(magic=b"VOXX"))
    with pytest.raises(voxreader.MagicMismatch):
        decode_bytes(b"VO")


def test_decode_bytes_bad_version():
    with pytest.raises(voxreader.UnsupportedVersion):
        decode_bytes(vox(version=200))
