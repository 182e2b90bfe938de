from __future__ import annotations

import ntpath
import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

from packages.shared.config import AppConfig
from .library import discover_installed_games


class GameClassifier(Protocol):
    """Decides whether a process is a tracked game. Must be pure."""

    def is_game(self, path: str, name: str) -> bool:
        ...


def _normalize(path: str, case_insensitive: bool) -> str:
    path = os.path.normpath(path)
    return path.lower() if case_insensitive else path


class AllowlistClassifier:
    """Matches on executable file name, case-insensitive."""

    def __init__(self, exe_names: Iterable[str]) -> None:
        self._names = frozenset(n.strip().lower() for n in exe_names if n.strip())

    def is_game(self, path: str, name: str) -> bool:
        if not self._names:
            return False
        base = ntpath.basename(path).lower()
        return base in self._names or (name or "").lower() in self._names


class DirectoryPrefixClassifier:
    """Matches executables located under one of the given directories."""

    def __init__(self, roots: Iterable[Union[str, Path]], case_insensitive: Optional[bool] = None) -> None:
        if case_insensitive is None:
            case_insensitive = sys.platform.startswith("win")
        self._ci = case_insensitive
        self._roots = tuple(
            _normalize(str(r), case_insensitive).rstrip(os.sep) + os.sep for r in roots if str(r)
        )

    def is_game(self, path: str, name: str) -> bool:
        if not path:
            return False
        p = _normalize(path, self._ci)
        return any(p.startswith(root) for root in self._roots)


class CompositeClassifier:
    def __init__(self, members: Iterable[GameClassifier]) -> None:
        self._members = list(members)

    def is_game(self, path: str, name: str) -> bool:
        return any(m.is_game(path, name) for m in self._members)


def build_classifier(cfg: AppConfig) -> CompositeClassifier:
    """Allowlist from cfg.games plus every install directory found in cfg.libraries."""
    members: list[GameClassifier] = []
    if cfg.games:
        members.append(AllowlistClassifier(cfg.games))
    install_dirs = discover_installed_games(cfg.libraries)
    if install_dirs:
        members.append(DirectoryPrefixClassifier(install_dirs))
    return CompositeClassifier(members)
