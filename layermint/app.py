"""Command-line bootstrap: build a collection from folders and write its archive."""

from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from pathlib import Path

from PyQt6.QtGui import QGuiApplication

from layermint.config.constants import APP_NAME, APP_VERSION, DEFAULT_COLLECTION_NAME
from layermint.config.settings import AppSettings
from layermint.core.collection import CollectionConfig
from layermint.core.generator import GeneratorController
from layermint.io.importer import import_layer_directory

log = logging.getLogger(__name__)


def _parse_layer_rarity(value: str) -> tuple[str, int]:
    name, sep, pct = value.rpartition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=PERCENT, got {value!r}")
    try:
        return name, int(pct)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{pct!r} is not an integer") from None


def build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="layermint",
        description="Generate unique layered images and pack them with a metadata table.",
    )
    parser.add_argument("layers_dir", type=Path, help="directory with one sub-directory per layer")
    parser.add_argument(
        "-o", "--output", type=Path, default=None, help="archive file or target directory"
    )
    parser.add_argument("-n", "--batch-size", type=int, default=settings.batch_size())
    parser.add_argument("--width", type=int, default=settings.output_width())
    parser.add_argument("--height", type=int, default=settings.output_height())
    parser.add_argument("--name", default=DEFAULT_COLLECTION_NAME)
    parser.add_argument("--description", default="")
    parser.add_argument("--prefix", default="")
    parser.add_argument(
        "--layer-rarity",
        type=_parse_layer_rarity,
        action="append",
        default=[],
        metavar="NAME=PERCENT",
        help="probability that a layer is included at all (repeatable)",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return parser


def run(args: argparse.Namespace, settings: AppSettings) -> int:
    """Generate and archive one collection. Returns a process exit code."""
    config = CollectionConfig(
        name=args.name,
        description=args.description,
        item_prefix=args.prefix,
        width=args.width,
        height=args.height,
    )
    rng = random.Random(args.seed) if args.seed is not None else None
    controller = GeneratorController(config, rng=rng)
    controller.warning_raised.connect(lambda message: log.error("%s", message))

    manager = controller.layer_manager
    import_layer_directory(manager, args.layers_dir)
    for name, pct in args.layer_rarity:
        layer = next((lyr for lyr in manager.layers if lyr.name == name), None)
        if layer is None:
            log.error("No layer named %r", name)
            return 2
        manager.set_layer_rarity(layer.layer_id, pct)

    log.info("%d layers, %d possible combinations", manager.count, controller.total_combinations)
    if args.batch_size > controller.total_combinations:
        controller.warning_raised.emit(
            f"You've requested {args.batch_size} items but there are only "
            f"{controller.total_combinations} possible unique combinations"
        )
        return 1
    controller.set_batch_size(args.batch_size)
    if not controller.generate_previews():
        return 1

    output = args.output or Path(settings.export_directory() or Path.cwd())
    written: list[Path] = []
    controller.archive_written.connect(written.append)
    # A local run has no payment collaborator.
    controller.gate.unlock()
    controller.request_download(output)
    if not written:
        return 1
    settings.set_export_directory(str(written[0].parent))
    print(written[0])
    return 0


def main(argv: list[str] | None = None) -> int:
    """Launch the generator."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QGuiApplication(sys.argv[:1])  # noqa: F841
    settings = AppSettings()
    args = build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return run(args, settings)


if __name__ == "__main__":
    sys.exit(main())
