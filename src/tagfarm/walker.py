"""Walking the music tree and linking every tagged file."""

from __future__ import annotations

from dataclasses import dataclass
from tagfarm.atom import AtomProber
from tagfarm.id3 import ID3Prober
from tagfarm.linker import LinkConfig
from tagfarm.linker import place_links
from tagfarm.tags import probe
from tagfarm.tags import TagProber
from tqdm import tqdm
from typing import Iterable
from typing import Iterator

import logging
import pathlib


logger = logging.getLogger(__name__)

DEFAULT_PROBERS: tuple[TagProber, ...] = (ID3Prober(), AtomProber())


@dataclass
class WalkSummary:
    """Counts gathered over one walk."""

    files: int = 0
    tagged: int = 0
    linked: int = 0


def iter_files(directory: pathlib.Path) -> Iterator[pathlib.Path]:
    """Recursively yield the regular files below *directory*, sorted.

    Symlinks are skipped, so a link farm inside the tree is not linked again.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory not found: {directory}")

    for path in sorted(directory.rglob("*")):
        if path.is_symlink() or not path.is_file():
            continue
        yield path


def process_file(
    path: pathlib.Path,
    config: LinkConfig,
    probers: Iterable[TagProber] = DEFAULT_PROBERS,
) -> list[pathlib.Path] | None:
    """Decode the tags of one file and place its links.

    Returns the links made, or None when the file has no tag container or
    cannot be read.
    """
    try:
        with path.open("rb") as f:
            record = probe(f, probers)
    except OSError as e:
        logger.warning(f"cannot read {path}: {e}")
        return None

    if record is None:
        logger.debug(f"no tags for {path}")
        return None

    return place_links(path, record, config)


def run(source: pathlib.Path, config: LinkConfig, *, progress: bool = True) -> WalkSummary:
    """Walk *source* and link every tagged file into the farm."""
    logger.info(f"Scanning {source} ...")
    files = list(iter_files(source))

    summary = WalkSummary(files=len(files))
    for path in tqdm(files, desc="Linking", disable=not progress):
        links = process_file(path, config)
        if links is None:
            continue
        summary.tagged += 1
        summary.linked += len(links)

    verb = "Would create" if config.dry_run else "Created"
    logger.info(f"{verb} {summary.linked} link(s) for {summary.tagged} of {summary.files} file(s).")
    return summary
