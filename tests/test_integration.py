"""Integration tests — a collection from layer setup through to the archive."""

import random
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from PyQt6.QtWidgets import QApplication

from layermint.core.collection import CollectionConfig
from layermint.core.combinatorics import Sampler
from layermint.core.generator import GeneratorController
from layermint.core.layer_manager import LayerManager
from layermint.core.variant import Variant
from layermint.io.metadata import MetadataTable

MakePng = Callable[..., Path]


def _build_stack(manager: LayerManager, make_png: MakePng) -> None:
    background = manager.add_layer("Background")
    manager.add_variants(
        background.layer_id,
        [
            Variant.from_file(make_png("day", "#87CEEB")),
            Variant.from_file(make_png("night", "#101030")),
        ],
    )
    body = manager.add_layer("Body")
    manager.add_variants(body.layer_id, [Variant.from_file(make_png("fox", "#FF8800", True))])
    hat = manager.add_layer("Hat")
    manager.add_variants(
        hat.layer_id,
        [
            Variant.from_file(make_png("cap", "#0000FF", True)),
            Variant.from_file(make_png("crown", "#FFD700", True)),
        ],
    )
    manager.set_variant_rarity(hat.layer_id, 0, 30)
    manager.set_variant_rarity(hat.layer_id, 1, 70)
    manager.set_layer_rarity(hat.layer_id, 50)


@pytest.fixture()
def controller(qapp: QApplication, make_png: MakePng) -> GeneratorController:
    config = CollectionConfig(name="Critters", item_prefix="Critter", width=16, height=16)
    ctrl = GeneratorController(config, rng=random.Random(21))
    _build_stack(ctrl.layer_manager, make_png)
    return ctrl


def test_stack_order_and_weights(controller: GeneratorController) -> None:
    layers = controller.layer_manager.layers
    assert [(layer.name, layer.z_order) for layer in layers] == [
        ("Background", 0),
        ("Body", 1),
        ("Hat", 2),
    ]
    assert [v.rarity for v in layers[0].variants] == [50, 50]
    assert [v.rarity for v in layers[1].variants] == [100]
    assert [v.rarity for v in layers[2].variants] == [30, 70]
    assert controller.total_combinations == 4


def test_generate_and_download(controller: GeneratorController, tmp_path: Path) -> None:
    assert controller.set_batch_size(4) == 4
    assert controller.generate_previews()
    previews = controller.previews
    assert len({item.key for item in previews}) == 4

    controller.gate.unlock()
    assert controller.request_download(tmp_path)
    archive = tmp_path / "critters.zip"
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        lines = zf.read("metadata.csv").decode("utf-8").splitlines()
    assert [f"nfts/Critter-{i}.png" for i in range(1, 5)] == [
        n for n in names if n.endswith(".png")
    ]
    assert len(lines) == 5
    header = lines[0].split(";")
    assert header[4:] == ["Background", "Body", "Hat"]
    for row in lines[1:]:
        cells = row.split(";")
        assert len(cells) == 7
        assert cells[4] in {"day", "night"}
        assert cells[5] == "fox"
        assert cells[6] in {"cap", "crown", "None"}


def test_hat_skipped_in_about_half_the_rows(qapp: QApplication, make_png: MakePng) -> None:
    manager = LayerManager()
    _build_stack(manager, make_png)
    layers = manager.layers
    config = CollectionConfig()
    rows = 0
    skipped = 0
    for seed in range(100):
        table = MetadataTable(layers, config)
        for number, item in enumerate(Sampler(random.Random(seed)).sample_batch(layers, 4), 1):
            table.add_item(item, number)
        rows += len(table.rows)
        skipped += sum(1 for row in table.rows if row[-1] == "None")
    assert rows == 400
    assert 0.3 < skipped / rows < 0.6
