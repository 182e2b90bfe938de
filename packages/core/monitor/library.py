"""Finds installed games by listing launcher library directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from packages.shared.config import GameLibrary

log = logging.getLogger(__name__)


def _matches_entity(entry: Path, entity_type: str) -> bool:
    if entity_type == "executable":
        return entry.is_file()
    if entity_type == "directory":
        return entry.is_dir()
    return entry.is_file() or entry.is_dir()


def _ignored(name: str, ignore: List[str]) -> bool:
    return any(name.startswith(prefix) for prefix in ignore)


def library_roots(library: GameLibrary, home: Optional[Path] = None) -> List[Path]:
    if home is None:
        try:
            home = Path.home()
        except RuntimeError:
            log.warning("Could not find home directory, skipping home paths %s", library.home_paths)
            home = None

    roots: List[Path] = []
    if home is not None:
        roots.extend(home / p for p in library.home_paths)
    roots.extend(Path(p) for p in library.absolute_paths)
    return roots


def discover_library(name: str, library: GameLibrary, home: Optional[Path] = None) -> List[Path]:
    found: List[Path] = []
    for root in library_roots(library, home):
        if not root.is_dir():
            log.debug("Library %s: %s does not exist", name, root)
            continue
        try:
            entries = sorted(root.iterdir())
        except OSError as e:
            log.warning("Library %s: cannot list %s: %s", name, root, e)
            continue
        for entry in entries:
            if not _matches_entity(entry, library.search_entity_type):
                continue
            if _ignored(entry.name, library.ignore):
                continue
            found.append(entry)
    log.info("Library %s: %d game(s) found", name, len(found))
    return found


def discover_installed_games(libraries: Dict[str, GameLibrary], home: Optional[Path] = None) -> List[Path]:
    found: List[Path] = []
    for name, library in sorted(libraries.items()):
        found.extend(discover_library(name, library, home))
    return found
