"""Pipeline orchestration: scan, aggregate, resolve."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

from .analyzers import (
    ClassifierRules,
    DependencyResolver,
    DirectoryAnalyzer,
    FileAnalyzer,
    TypeClassifier,
)
from .analyzers.dependencies import EXTERNAL_NAMESPACE_PREFIXES
from .config import CSMapConfig, load_config
from .logging import get_logger
from .models import ProjectModel
from .repo_scanner import RepoScanner

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class Orchestrator:
    """Coordinates a full project analysis run.

    Every stage finishes before the next starts: the dependency resolver needs
    the namespaces of all directories before it can resolve any of them.
    """

    def __init__(
        self,
        config: CSMapConfig | None = None,
        *,
        scanner: RepoScanner | None = None,
        file_analyzer: FileAnalyzer | None = None,
        directory_analyzer: DirectoryAnalyzer | None = None,
        resolver: DependencyResolver | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._config = config
        self._config_path = config_path
        self._scanner = scanner
        self._file_analyzer = file_analyzer
        self.directory_analyzer = directory_analyzer or DirectoryAnalyzer()
        self._resolver = resolver
        self.logger = get_logger("orchestrator")

    def run_analysis(self, path: str | Path, *, workers: Optional[int] = None) -> ProjectModel:
        """Analyze the project at ``path`` and return the populated model."""
        project_path = Path(path).expanduser()
        if not project_path.exists():
            raise FileNotFoundError(f"Path '{path}' does not exist.")

        config = self._load_config(project_path)
        scanner = self._scanner or RepoScanner(config)
        file_analyzer = self._file_analyzer or FileAnalyzer(self._build_classifier(config))
        resolver = self._resolver or DependencyResolver(
            EXTERNAL_NAMESPACE_PREFIXES + tuple(config.external_namespaces)
        )
        worker_count = workers if workers is not None else config.workers

        scan = scanner.scan(project_path)
        self.logger.info("Analyzing: %s", scan.root)
        self.logger.debug(
            "Scanner found %d C# files in %d directories", scan.file_count, len(scan.directories)
        )

        project = ProjectModel(
            project_path=str(scan.root),
            analyzed_at=datetime.now(UTC).strftime(TIMESTAMP_FORMAT),
        )

        # Files are analyzed in one batch so the merge below follows traversal order.
        all_paths = [source for directory in scan.directories for source in directory.source_files]
        records = {
            record.relative_path: record
            for record in file_analyzer.analyze_files(all_paths, scan.root, workers=worker_count)
        }

        for scanned in scan.directories:
            files = []
            for source in scanned.source_files:
                record = records.get(source.relative_to(scan.root).as_posix())
                if record is not None:
                    files.append(record)
            directory = self.directory_analyzer.aggregate(scanned.path, files, asmdef=scanned.asmdef)
            if directory is None:
                self.logger.debug("Skipping %s: no source files could be analyzed", scanned.path)
                continue
            project.directories.append(directory)

        resolver.resolve(project)
        project.refresh_totals()

        self.logger.info(
            "Found %d C# files, %d types in %d directories.",
            project.total_files,
            project.total_types,
            len(project.directories),
        )
        return project

    def _load_config(self, project_path: Path) -> CSMapConfig:
        if self._config is not None:
            return self._config
        return load_config(self._config_path or project_path)

    @staticmethod
    def _build_classifier(config: CSMapConfig) -> TypeClassifier:
        rules = ClassifierRules().extended(
            lifecycle_types=config.classification.lifecycle_types,
            asset_types=config.classification.asset_types,
            tooling_types=config.classification.tooling_types,
        )
        return TypeClassifier(rules)


__all__ = ["Orchestrator", "TIMESTAMP_FORMAT"]
