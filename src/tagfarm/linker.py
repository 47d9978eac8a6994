"""Placing links to tagged files under artist/album directories."""

from __future__ import annotations

from dataclasses import dataclass
from tagfarm.tags import TagRecord

import logging
import pathlib
import re


logger = logging.getLogger(__name__)

ALBUMS_DIR = "albums"
ARTISTS_DIR = "artists"


@dataclass(frozen=True)
class LinkConfig:
    """Where and how links are placed."""

    farm_dir: pathlib.Path
    hardlink: bool = False
    dry_run: bool = False


def _sanitize_path_component(name: str) -> str:
    """Sanitize a string for use as a directory or file name component."""
    # Replace path separators and other problematic characters
    name = re.sub(r'[/\\:*?"<>|\x00]', "_", name).strip()
    if name in ("", ".", ".."):
        return "_"
    return name


def track_filename(record: TagRecord, source: pathlib.Path) -> str:
    """Build the link file name: ``<track>_<title><ext>``."""
    title = _sanitize_path_component(record.title or "")
    track = record.track if record.track is not None else 0
    return f"{track}_{title}{source.suffix}"


def determine_link_paths(
    source: pathlib.Path,
    record: TagRecord,
    farm_dir: pathlib.Path,
) -> list[pathlib.Path]:
    """Determine where links to *source* belong.

    Layout:
        farm_dir/albums/Album/N_Title.ext
        farm_dir/artists/Artist/Album/N_Title.ext

    Files without a title get no links; the artist link also needs an album.
    """
    if not record.title:
        return []

    filename = track_filename(record, source)
    paths: list[pathlib.Path] = []

    if record.album:
        album = _sanitize_path_component(record.album)
        paths.append(farm_dir / ALBUMS_DIR / album / filename)
    else:
        logger.debug(f"no album link for {source}")

    if record.artist and record.album:
        artist = _sanitize_path_component(record.artist)
        album = _sanitize_path_component(record.album)
        paths.append(farm_dir / ARTISTS_DIR / artist / album / filename)
    else:
        logger.debug(f"no artist link for {source}")

    return paths


def _make_link(source: pathlib.Path, target: pathlib.Path, hardlink: bool) -> None:
    if hardlink:
        target.hardlink_to(source)
    else:
        target.symlink_to(source.absolute())


def place_links(source: pathlib.Path, record: TagRecord, config: LinkConfig) -> list[pathlib.Path]:
    """Create the links for one file and return the ones that were made.

    Targets that already exist are left as they are. A link that cannot be
    created is logged and skipped; the remaining links are still attempted.
    """
    made: list[pathlib.Path] = []
    for target in determine_link_paths(source, record, config.farm_dir):
        if target.exists() or target.is_symlink():
            logger.debug(f"already linked: {target}")
            continue

        if config.dry_run:
            logger.info(f"  {source} -> {target}")
            made.append(target)
            continue

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _make_link(source, target, config.hardlink)
        except OSError as e:
            logger.warning(f"cannot link {source} -> {target}: {e}")
            continue

        logger.debug(f"linked {target}")
        made.append(target)
    return made
