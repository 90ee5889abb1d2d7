"""Tests for the command-line bootstrap."""

import argparse
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest
from PyQt6.QtCore import QSettings

from layermint.app import build_parser, run
from layermint.config.settings import AppSettings

MakePng = Callable[..., Path]


@pytest.fixture()
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(QSettings(str(tmp_path / "prefs.ini"), QSettings.Format.IniFormat))


@pytest.fixture()
def layers_dir(make_png: MakePng, tmp_path: Path) -> Path:
    root = tmp_path / "layers"
    for folder, names in {"0-background": ["day", "night"], "1-hat": ["cap", "crown"]}.items():
        (root / folder).mkdir(parents=True)
        for name in names:
            make_png(name, "#336699").rename(root / folder / f"{name}.png")
    return root


def _args(settings: AppSettings, *argv: str) -> argparse.Namespace:
    return build_parser(settings).parse_args(list(argv))


def test_parser_defaults_from_settings(settings: AppSettings) -> None:
    settings.set_output_size(64, 32)
    args = _args(settings, "layers")
    assert (args.width, args.height) == (64, 32)
    assert args.batch_size == 100


def test_layer_rarity_argument(settings: AppSettings) -> None:
    args = _args(settings, "layers", "--layer-rarity", "1-hat=50")
    assert args.layer_rarity == [("1-hat", 50)]
    with pytest.raises(SystemExit):
        _args(settings, "layers", "--layer-rarity", "oops")


def test_run_writes_archive(
    settings: AppSettings, layers_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    out = tmp_path / "out"
    out.mkdir()
    args = _args(
        settings,
        str(layers_dir),
        *("-o", str(out), "-n", "4", "--width", "16", "--height", "16"),
        *("--name", "Hats", "--prefix", "Hat", "--seed", "3"),
    )
    assert run(args, settings) == 0
    archive = out / "hats.zip"
    assert capsys.readouterr().out.strip() == str(archive)
    with zipfile.ZipFile(archive) as zf:
        pngs = [n for n in zf.namelist() if n.endswith(".png")]
        lines = zf.read("metadata.csv").decode("utf-8").splitlines()
    assert sorted(pngs) == [f"nfts/Hat-{i}.png" for i in range(1, 5)]
    assert len(lines) == 5
    assert settings.export_directory() == str(out)


def test_run_rejects_oversized_batch(
    settings: AppSettings, layers_dir: Path, tmp_path: Path
) -> None:
    args = _args(settings, str(layers_dir), "-o", str(tmp_path), "-n", "5")
    assert run(args, settings) == 1
    assert list(tmp_path.glob("*.zip")) == []


def test_run_unknown_layer_rarity(
    settings: AppSettings, layers_dir: Path, tmp_path: Path
) -> None:
    args = _args(settings, str(layers_dir), "-o", str(tmp_path), "--layer-rarity", "nope=10")
    assert run(args, settings) == 2
