"""Cross-directory dependency resolution from using directives."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import DirectoryRecord, ProjectModel

logger = get_logger("dependencies")

EXTERNAL_NAMESPACE_PREFIXES: Tuple[str, ...] = (
    "System",
    "UnityEngine",
    "UnityEditor",
    "Unity.",
    "TMPro",
    "Microsoft",
    "Newtonsoft",
    "DG.Tweening",
)


def build_namespace_ownership(directories: Iterable[DirectoryRecord]) -> Dict[str, str]:
    """Map each namespace to the first directory, in traversal order, that declares it."""
    ownership: Dict[str, str] = {}
    for directory in directories:
        for record in directory.files:
            if record.namespace is not None and record.namespace not in ownership:
                ownership[record.namespace] = directory.path
    return ownership


def find_owner(namespace: str, ownership: Mapping[str, str]) -> Optional[str]:
    """Resolve ``namespace`` to a directory: exact match, else the longest related namespace.

    A registered namespace is related when one of the two names is a dotted
    prefix of the other. Equal lengths keep the first-registered candidate.
    """
    if namespace in ownership:
        return ownership[namespace]

    best: Optional[str] = None
    for candidate in ownership:
        if not (
            candidate.startswith(namespace + ".") or namespace.startswith(candidate + ".")
        ):
            continue
        if best is None or len(candidate) > len(best):
            best = candidate
    return ownership[best] if best is not None else None


class DependencyResolver:
    """Fills ``referenced_directories`` for every directory of a project."""

    def __init__(self, external_prefixes: Sequence[str] = EXTERNAL_NAMESPACE_PREFIXES) -> None:
        self.external_prefixes = tuple(external_prefixes)

    def is_external(self, namespace: str) -> bool:
        return namespace.startswith(self.external_prefixes)

    def resolve(self, project: ProjectModel) -> None:
        ownership = build_namespace_ownership(project.directories)
        logger.debug("Namespace ownership map holds %d namespaces", len(ownership))
        for directory in project.directories:
            directory.dependencies.referenced_directories = self.referenced_directories(
                directory, ownership
            )

    def referenced_directories(
        self, directory: DirectoryRecord, ownership: Mapping[str, str]
    ) -> List[str]:
        local = set(directory.declared_namespaces())
        referenced: List[str] = []
        for record in directory.files:
            for namespace in record.usings:
                if namespace in local or self.is_external(namespace):
                    continue
                owner = find_owner(namespace, ownership)
                if owner is None or owner == directory.path:
                    continue
                if owner not in referenced:
                    referenced.append(owner)
        referenced.sort()
        return referenced


__all__ = [
    "DependencyResolver",
    "EXTERNAL_NAMESPACE_PREFIXES",
    "build_namespace_ownership",
    "find_owner",
]
