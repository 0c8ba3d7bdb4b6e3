"""File-level aggregation: parse a source file and classify every type in it."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import ClassifiedType, FieldRecord, FileRecord
from ..syntax.nodes import Declaration, EnumDeclaration, NamespaceGroup, ParsedSource
from ..syntax.parser import CSharpParser
from .classifier import TypeClassifier

logger = get_logger("files")


def file_namespace(members: Sequence[Declaration]) -> Optional[str]:
    """Return the file-scoped namespace if present, else the first namespace block."""
    groups = [member for member in members if isinstance(member, NamespaceGroup)]
    for group in groups:
        if group.file_scoped:
            return group.name
    return groups[0].name if groups else None


def unique_usings(usings: Iterable[str]) -> List[str]:
    """Deduplicate usings, keeping first-occurrence order."""
    return list(dict.fromkeys(name for name in usings if name))


class FileAnalyzer:
    """Turns parsed C# sources into :class:`FileRecord` objects."""

    def __init__(
        self,
        classifier: TypeClassifier | None = None,
        parser_factory: Callable[[], CSharpParser] = CSharpParser,
    ) -> None:
        self.classifier = classifier or TypeClassifier()
        self._parser_factory = parser_factory
        self._local = threading.local()

    def analyze(self, path: Path, base_path: Path) -> FileRecord:
        """Parse and aggregate a single file; errors propagate to the caller."""
        relative_path = path.relative_to(base_path).as_posix()
        parsed = self._parser().parse_file(path)
        if parsed.has_errors:
            logger.debug("Syntax errors in %s; using the partial tree", relative_path)
        return self.aggregate(parsed, name=path.name, relative_path=relative_path)

    def analyze_files(
        self, paths: Sequence[Path], base_path: Path, *, workers: int = 1
    ) -> List[FileRecord]:
        """Analyze files in order, skipping any that fail.

        With ``workers > 1`` files are processed on a thread pool; results are
        still returned in the order of ``paths``.
        """
        if workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(lambda path: self._try_analyze(path, base_path), paths))
        else:
            results = [self._try_analyze(path, base_path) for path in paths]
        return [record for record in results if record is not None]

    def aggregate(self, parsed: ParsedSource, *, name: str, relative_path: str) -> FileRecord:
        return FileRecord(
            name=name,
            relative_path=relative_path,
            namespace=file_namespace(parsed.members),
            usings=unique_usings(parsed.usings),
            types=self._classify_members(parsed.members, None),
        )

    def _try_analyze(self, path: Path, base_path: Path) -> Optional[FileRecord]:
        try:
            return self.analyze(path, base_path)
        except Exception as exc:
            logger.warning("Failed to analyze %s: %s", path, exc)
            return None

    def _parser(self) -> CSharpParser:
        # tree-sitter parsers are not thread-safe; keep one per worker thread.
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = self._parser_factory()
            self._local.parser = parser
        return parser

    def _classify_members(
        self, members: Iterable[Declaration], namespace: Optional[str]
    ) -> List[ClassifiedType]:
        types: List[ClassifiedType] = []
        for member in members:
            if isinstance(member, NamespaceGroup):
                types.extend(self._classify_members(member.members, member.name))
            else:
                types.append(self._classify(member, namespace))
        return types

    def _classify(self, declaration: Declaration, namespace: Optional[str]) -> ClassifiedType:
        category = self.classifier.classify(declaration, namespace)
        if isinstance(declaration, EnumDeclaration):
            return ClassifiedType(
                name=declaration.name,
                kind=declaration.kind,
                category=category,
                modifiers=list(declaration.modifiers),
                attributes=list(declaration.attributes),
                enum_values=list(declaration.members),
            )
        return ClassifiedType(
            name=declaration.name,
            kind=declaration.kind,
            category=category,
            modifiers=list(declaration.modifiers),
            base_type=declaration.base_type,
            interfaces=list(declaration.interfaces),
            attributes=list(declaration.attributes),
            methods=list(declaration.methods),
            fields=[
                FieldRecord(
                    name=item.name,
                    type=item.type,
                    modifiers=list(item.modifiers),
                    attributes=list(item.attributes),
                    is_exposed_state=self.classifier.is_exposed_state(item),
                )
                for item in declaration.fields
            ],
            properties=list(declaration.properties),
            events=list(declaration.events),
            nested_types=self._classify_members(declaration.nested_types, namespace),
        )


__all__ = ["FileAnalyzer", "file_namespace", "unique_usings"]
