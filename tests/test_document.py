"""Tests for loading and saving NDF documents."""

import pytest

from ndf.document import NDFDocument


def test_load_and_save(tmp_path):
    source = tmp_path / "units.ndf"
    source.write_text("Unit{Name:Tank;Armor:@PP.Expand[1,2];}", encoding="utf-8")

    document = NDFDocument.from_file(source)
    assert document.path == source
    assert len(document.layers) == 1
    unit = document.layers[0]["Unit"]
    assert [layer["Armor"].value for layer in unit] == ["1", "2"]

    target = tmp_path / "out.ndf"
    assert document.save(target, pretty=False) == target
    assert target.read_text(encoding="utf-8") == "Unit{Name:Tank;Armor:1;Name:Tank;Armor:2;}"
    assert document.path == target


def test_save_in_place(tmp_path):
    source = tmp_path / "a.ndf"
    source.write_text("A:1;", encoding="utf-8")
    document = NDFDocument.from_file(source)
    document.add_entry("B", "2")
    document.save()
    assert NDFDocument.from_file(source).to_text(pretty=False) == "A:1;B:2;"


def test_save_without_path():
    document = NDFDocument.from_text("A:1;")
    with pytest.raises(ValueError):
        document.save()


def test_from_file_without_preprocessing(tmp_path):
    source = tmp_path / "raw.ndf"
    source.write_text("A:@PP.Expand[1,2];", encoding="utf-8")
    document = NDFDocument.from_file(source, {"preprocess": False})
    assert document.layers[0]["A"].value == "@PP.Expand[1,2]"


def test_to_text_indent():
    document = NDFDocument()
    block = document.add_entry("Block")
    block.add_entry("A", "1")
    assert document.to_text(indent="  ") == "Block\n{\n  A:1;\n}"
