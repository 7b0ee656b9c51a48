from __future__ import annotations

import struct

import pytest
from nbtlib import Byte, Compound, Double, Int, List as NbtList, String

from conftest import encode_document
from playerdata import StructuralError
from playerdata.tags import format_path, format_value, kind_name, load_document, parse_document, walk


def test_parse_raw_and_gzipped_documents_match(player_root: Compound) -> None:
    raw_name, raw_root = parse_document(encode_document(player_root, "Player"))
    gz_name, gz_root = parse_document(encode_document(player_root, "Player", gzipped=True))

    assert raw_name == gz_name == "Player"
    assert raw_root == gz_root
    assert int(raw_root["Health"]) == 18
    assert kind_name(raw_root["Pos"]) == "List"


def test_load_document_reads_file(tmp_path, player_bytes: bytes) -> None:
    path = tmp_path / "Notch.dat"
    path.write_bytes(player_bytes)

    _, root = load_document(path)
    assert int(root["XpTotal"]) == 112


@pytest.mark.parametrize("cut", [1, 5, 20])
def test_truncated_document_is_structural_error(player_root: Compound, cut: int) -> None:
    data = encode_document(player_root)
    with pytest.raises(StructuralError):
        parse_document(data[:-cut])


def test_truncated_gzip_stream_is_structural_error(player_bytes: bytes) -> None:
    with pytest.raises(StructuralError):
        parse_document(player_bytes[:-10])


def test_corrupt_gzip_is_structural_error() -> None:
    with pytest.raises(StructuralError):
        parse_document(b"\x1f\x8bnot really gzip at all")


def test_unknown_tag_id_is_structural_error() -> None:
    # Root compound holding a single entry with tag id 99.
    data = b"\x0a\x00\x00" + b"\x63\x00\x01x" + b"\x00\x00\x00\x00" + b"\x00"
    with pytest.raises(StructuralError):
        parse_document(data)


@pytest.mark.parametrize("data", [b"", b"\x01\x00\x00\x05", b"\x0a\x00"])
def test_bad_root_is_structural_error(data: bytes) -> None:
    with pytest.raises(StructuralError):
        parse_document(data)


def test_unexpected_shape_is_not_an_error() -> None:
    _, root = parse_document(encode_document(Compound({"Health": String("lots")})))
    assert str(root["Health"]) == "lots"


def test_walk_and_format() -> None:
    root = Compound(
        {
            "Pos": NbtList[Double]([Double(1.0), Double(2.0)]),
            "Inventory": NbtList[Compound]([Compound({"Slot": Byte(3)})]),
            "XpLevel": Int(7),
        }
    )

    rendered = {format_path(path): format_value(tag) for path, tag in walk(root)}

    assert rendered["Pos"] == "2 items of Double"
    assert rendered["Pos[1]"] == "2.0"
    assert rendered["Inventory[0]"] == "1 entries"
    assert rendered["Inventory[0].Slot"] == "3"
    assert rendered["XpLevel"] == "7"



def _root_with_entry(tag_id: int, payload: bytes) -> bytes:
    return b"\x0a\x00\x00" + bytes([tag_id]) + b"\x00\x01L" + payload + b"\x00"


@pytest.mark.parametrize("length", [1, 2**31 - 1])
def test_list_of_end_with_elements_is_structural_error(length: int) -> None:
    data = _root_with_entry(9, b"\x00" + struct.pack(">i", length))
    with pytest.raises(StructuralError, match="End"):
        parse_document(data)


def test_empty_list_of_end_is_accepted() -> None:
    _, root = parse_document(_root_with_entry(9, b"\x00" + struct.pack(">i", 0)))
    assert len(root["L"]) == 0


def test_empty_untyped_list_is_accepted() -> None:
    _, root = parse_document(encode_document(Compound({"Inventory": NbtList([])})))
    assert len(root["Inventory"]) == 0


def test_list_longer_than_document_is_structural_error() -> None:
    data = _root_with_entry(9, b"\x01" + struct.pack(">i", 2**31 - 1) + b"\x01\x02")
    with pytest.raises(StructuralError):
        parse_document(data)


def test_negative_array_length_is_structural_error() -> None:
    data = _root_with_entry(7, struct.pack(">i", -1))
    with pytest.raises(StructuralError, match="Negative"):
        parse_document(data)


def test_excessive_nesting_is_structural_error() -> None:
    nested = (b"\x09" + struct.pack(">i", 1)) * 600 + b"\x00" + struct.pack(">i", 0)
    with pytest.raises(StructuralError, match="nested"):
        parse_document(_root_with_entry(9, nested))


def test_root_name_is_kept(player_root: Compound) -> None:
    name, root = parse_document(encode_document(player_root, "Steve"))
    assert name == "Steve"
    assert isinstance(root, Compound)
