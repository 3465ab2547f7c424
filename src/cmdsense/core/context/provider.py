"""
Context Provider Interface

Completions for paths, git branches and npm scripts need raw candidate
lists from the user's environment. This module defines the abstract
interface for supplying them, a null implementation that supplies nothing,
and a local implementation backed by the filesystem and ``git``.
"""

import json
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ...utils.logging import get_logger, performance_timer


@dataclass
class PathCandidate:
    """One directory entry offered for completion."""
    name: str
    is_directory: bool = False


class ContextProvider(ABC):
    """
    Abstract base class for environment lookups.

    Implementations may raise; the completion service treats any failure
    as "no candidates".
    """

    @abstractmethod
    def list_directory(self, directory: str, prefix: str = "", dirs_only: bool = False) -> List[PathCandidate]:
        """
        List entries of ``directory`` whose name starts with ``prefix``.

        Args:
            directory: Absolute or user-relative directory path
            prefix: Name prefix to filter on
            dirs_only: Only return directories
        """
        pass

    @abstractmethod
    def git_branches(self, directory: str) -> List[str]:
        """Branch names of the repository containing ``directory``."""
        pass

    @abstractmethod
    def npm_scripts(self, directory: str) -> List[str]:
        """Script names from ``package.json`` in ``directory``."""
        pass


class NullContextProvider(ContextProvider):
    """Provider for environments with no filesystem or VCS access."""

    def list_directory(self, directory: str, prefix: str = "", dirs_only: bool = False) -> List[PathCandidate]:
        return []

    def git_branches(self, directory: str) -> List[str]:
        return []

    def npm_scripts(self, directory: str) -> List[str]:
        return []


class LocalContextProvider(ContextProvider):
    """Reads the local filesystem and shells out to ``git``."""

    def __init__(self, git_timeout: float = 2.0, show_hidden: bool = False):
        self.git_timeout = git_timeout
        self.show_hidden = show_hidden
        self.logger = get_logger(__name__)

    def list_directory(self, directory: str, prefix: str = "", dirs_only: bool = False) -> List[PathCandidate]:
        target = Path(directory).expanduser()
        candidates = []

        with os.scandir(target) as entries:
            for entry in entries:
                if not entry.name.startswith(prefix):
                    continue
                if entry.name.startswith('.') and not prefix.startswith('.') and not self.show_hidden:
                    continue
                is_dir = entry.is_dir()
                if dirs_only and not is_dir:
                    continue
                candidates.append(PathCandidate(entry.name, is_dir))

        return sorted(candidates, key=lambda c: (not c.is_directory, c.name))

    @performance_timer("git branch lookup")
    def git_branches(self, directory: str) -> List[str]:
        result = subprocess.run(
            ["git", "branch", "--format=%(refname:short)"],
            cwd=str(Path(directory).expanduser()),
            capture_output=True,
            text=True,
            timeout=self.git_timeout,
        )

        if result.returncode != 0:
            self.logger.debug(f"git branch failed in {directory}: {result.stderr.strip()}")
            return []

        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def npm_scripts(self, directory: str) -> List[str]:
        package_json = Path(directory).expanduser() / "package.json"
        if not package_json.exists():
            return []

        with open(package_json, 'r', encoding='utf-8') as f:
            data = json.load(f)

        scripts = data.get("scripts") or {}
        return list(scripts) if isinstance(scripts, dict) else []
