"""Tests for variant import."""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from layermint.core.layer_manager import LayerManager
from layermint.io import importer
from layermint.io.importer import import_layer_directory, import_variants

MakePng = Callable[..., Path]


def test_import_pngs(manager: LayerManager, make_png: MakePng) -> None:
    layer = manager.add_layer("Eyes")
    paths = [
        make_png("round", "#FFFFFF"),
        make_png("sleepy", "#000000"),
        make_png("wink", "#FF0000"),
    ]
    added = import_variants(manager, layer.layer_id, paths)
    assert [v.name for v in added] == ["round", "sleepy", "wink"]
    assert [v.rarity for v in layer.variants] == [33, 33, 33]


def test_rejects_non_png(
    manager: LayerManager, make_png: MakePng, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    layer = manager.add_layer("Eyes")
    text = tmp_path / "notes.txt"
    text.write_text("hello")
    fake = tmp_path / "fake.png"
    fake.write_bytes(b"not an image")
    with caplog.at_level(logging.WARNING, logger="layermint.io.importer"):
        added = import_variants(manager, layer.layer_id, [text, fake, make_png("ok", "#00FF00")])
    assert [v.name for v in added] == ["ok"]
    assert "notes.txt" in caplog.text
    assert "fake.png" in caplog.text


def test_oversize_file_accepted_with_warning(
    manager: LayerManager,
    make_png: MakePng,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(importer, "UPLOAD_SIZE_GUIDANCE", 1)
    layer = manager.add_layer("Eyes")
    with caplog.at_level(logging.WARNING, logger="layermint.io.importer"):
        added = import_variants(manager, layer.layer_id, [make_png("big", "#00FF00")])
    assert len(added) == 1
    assert "guidance" in caplog.text


def test_import_layer_directory(manager: LayerManager, make_png: MakePng, tmp_path: Path) -> None:
    root = tmp_path / "layers"
    for folder, names in {"1-background": ["sky", "sea"], "2-hat": ["cap"]}.items():
        (root / folder).mkdir(parents=True)
        for name in names:
            make_png(name, "#123456").rename(root / folder / f"{name}.png")
    layers = import_layer_directory(manager, root)
    assert [layer.name for layer in layers] == ["1-background", "2-hat"]
    assert [v.name for v in layers[0].variants] == ["sea", "sky"]
    assert [layer.z_order for layer in layers] == [0, 1]
