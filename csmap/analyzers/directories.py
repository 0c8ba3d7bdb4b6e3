"""Directory-level aggregation of file records."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..models import Category, DirectoryRecord, DirectoryStats, FileRecord

_CATEGORY_BUCKETS = {
    Category.MONO_BEHAVIOUR_LIKE: "monobehaviours",
    Category.DATA_ASSET_LIKE: "scriptable_objects",
    Category.INTERFACE_KIND: "interfaces",
    Category.EDITOR_TOOLING: "editor_scripts",
    Category.PLAIN_TYPE: "plain_types",
}


def compute_stats(files: Sequence[FileRecord]) -> DirectoryStats:
    """Count files and types; each type lands in exactly one bucket."""
    stats = DirectoryStats(total_scripts=len(files))
    for record in files:
        for declared in record.iter_types():
            if declared.kind == "enum":
                stats.enums += 1
                continue
            bucket = _CATEGORY_BUCKETS[declared.category]
            setattr(stats, bucket, getattr(stats, bucket) + 1)
    return stats


def collect_namespaces(files: Iterable[FileRecord]) -> List[str]:
    """Distinct, sorted union of every using across ``files``."""
    return sorted({name for record in files for name in record.usings})


class DirectoryAnalyzer:
    """Builds :class:`DirectoryRecord` objects from per-file results."""

    def aggregate(
        self, path: str, files: Sequence[FileRecord], *, asmdef: Optional[str] = None
    ) -> Optional[DirectoryRecord]:
        """Return a record for ``path``, or None when no file survived analysis."""
        if not files:
            return None
        record = DirectoryRecord(path=path, asmdef=asmdef, files=list(files))
        self.refresh(record)
        return record

    @staticmethod
    def refresh(record: DirectoryRecord) -> None:
        """Recompute the derived stats and namespace list from ``record.files``."""
        record.stats = compute_stats(record.files)
        record.dependencies.uses_namespaces = collect_namespaces(record.files)


__all__ = ["DirectoryAnalyzer", "collect_namespaces", "compute_stats"]
