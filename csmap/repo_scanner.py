"""Project walking: locate the source root and list source-bearing directories."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import CSMapConfig
from .logging import get_logger

logger = get_logger("scanner")

SOURCE_SUFFIX = ".cs"
MODULE_DEFINITION_SUFFIX = ".asmdef"

_EXCLUDED_DIRS = {
    "library",
    "temp",
    "logs",
    "obj",
    "build",
    "builds",
    "memorycaptures",
    "recordings",
    "usersettings",
    ".git",
    ".vs",
    ".idea",
    ".vscode",
    "textmesh pro",
    "textmeshpro",
    "node_modules",
    "bin",
}

_EXCLUDED_EXTENSIONS = {
    ".meta", ".png", ".jpg", ".jpeg", ".tga", ".psd", ".exr", ".gif", ".bmp",
    ".fbx", ".obj", ".blend", ".3ds", ".dae",
    ".wav", ".mp3", ".ogg", ".aiff", ".flac",
    ".mat", ".physicmaterial", ".physicsmaterial2d",
    ".dll", ".so", ".a", ".aar", ".jar", ".bundle",
    ".ttf", ".otf", ".fontsettings",
    ".lighting", ".giparams",
    ".unity", ".prefab", ".asset", ".preset",
}


@dataclass
class IgnoreRule:
    """A gitignore-style pattern from .gitignore or ``exclude_paths`` in .csmap.yml.

    The same matcher serves both sources. Rules apply in order and the last
    matching rule decides, so a ``!pattern`` can re-include a path.
    """

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


@dataclass
class ScannedDirectory:
    """A directory holding at least one source file."""

    path: str
    source_files: List[Path]
    asmdef: Optional[str] = None


@dataclass
class ScanResult:
    root: Path
    directories: List[ScannedDirectory] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return sum(len(directory.source_files) for directory in self.directories)


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def find_source_root(project_path: Path) -> Path:
    """Return the Assets directory when the path is, or contains, one."""
    if project_path.name.lower() == "assets":
        return project_path
    assets = project_path / "Assets"
    if assets.is_dir():
        return assets
    return project_path


def read_module_name(asmdef_path: Path) -> str:
    """Read the assembly name from an .asmdef file, falling back to its stem."""
    try:
        data = json.loads(asmdef_path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as exc:
        logger.debug("Could not read %s: %s", asmdef_path, exc)
        return asmdef_path.stem
    name = data.get("name") if isinstance(data, dict) else None
    return name if isinstance(name, str) and name else asmdef_path.stem


class RepoScanner:
    """Walks a Unity project and lists directories that contain C# sources."""

    def __init__(self, config: CSMapConfig | None = None) -> None:
        self._excluded_dirs = set(_EXCLUDED_DIRS)
        self._excluded_extensions = set(_EXCLUDED_EXTENSIONS)
        self._exclude_patterns: List[str] = []
        self._respect_gitignore = False
        if config is not None:
            self._excluded_dirs.update(name.lower() for name in config.exclude_dirs)
            self._excluded_extensions.update(config.exclude_extensions)
            self._exclude_patterns = list(config.exclude_paths)
            self._respect_gitignore = config.respect_gitignore

    def scan(self, path: str | os.PathLike[str]) -> ScanResult:
        """Return source-bearing directories in pre-order traversal order."""
        project_path = Path(path).expanduser().resolve()
        if not project_path.exists():
            raise FileNotFoundError(f"Path '{path}' does not exist.")
        if not project_path.is_dir():
            raise NotADirectoryError(f"Path '{path}' is not a directory.")

        root = find_source_root(project_path)
        rules = self._load_ignore_rules(root)
        result = ScanResult(root=root)

        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix()

            dirnames[:] = sorted(
                name
                for name in dirnames
                if not self._skip_directory(name, _join(rel_dir, name), rules)
            )

            sources: List[Path] = []
            module_files: List[str] = []
            for filename in sorted(filenames):
                suffix = Path(filename).suffix.lower()
                if suffix in self._excluded_extensions:
                    continue
                if _should_ignore(_join(rel_dir, filename), False, rules):
                    continue
                if suffix == SOURCE_SUFFIX:
                    sources.append(current_dir / filename)
                elif suffix == MODULE_DEFINITION_SUFFIX:
                    module_files.append(filename)

            if not sources:
                continue
            asmdef = read_module_name(current_dir / module_files[0]) if module_files else None
            result.directories.append(
                ScannedDirectory(path=rel_dir, source_files=sources, asmdef=asmdef)
            )
            logger.debug("Found %d source files in %s", len(sources), rel_dir)

        return result

    def _skip_directory(self, name: str, rel_path: str, rules: Sequence[IgnoreRule]) -> bool:
        if name.startswith("."):
            return True
        if name.lower() in self._excluded_dirs:
            return True
        return _should_ignore(rel_path, True, rules)

    def _load_ignore_rules(self, root: Path) -> List[IgnoreRule]:
        rules = _parse_gitignore(root / ".gitignore") if self._respect_gitignore else []
        rules.extend(_rules_from_patterns(self._exclude_patterns))
        return rules


def _rules_from_patterns(patterns: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for pattern in patterns:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _join(rel_dir: str, name: str) -> str:
    return name if rel_dir == "." else f"{rel_dir}/{name}"


__all__ = ["RepoScanner", "ScanResult", "ScannedDirectory", "find_source_root", "read_module_name"]
