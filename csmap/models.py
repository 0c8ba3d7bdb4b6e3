"""Core data models shared across csmap components."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from .syntax.nodes import AttributeInfo, EventDeclaration, MethodDeclaration, PropertyDeclaration


class Category(str, Enum):
    """Semantic bucket assigned to a type declaration."""

    MONO_BEHAVIOUR_LIKE = "MonoBehaviourLike"
    DATA_ASSET_LIKE = "DataAssetLike"
    INTERFACE_KIND = "InterfaceKind"
    EDITOR_TOOLING = "EditorTooling"
    PLAIN_TYPE = "PlainType"


@dataclass
class FieldRecord:
    """A field together with its computed serialization visibility."""

    name: str
    type: str
    modifiers: List[str] = field(default_factory=list)
    attributes: List[AttributeInfo] = field(default_factory=list)
    is_exposed_state: bool = False


@dataclass
class ClassifiedType:
    """A type declaration with its category; nested types stay as children."""

    name: str
    kind: str
    category: Category
    modifiers: List[str] = field(default_factory=list)
    base_type: Optional[str] = None
    interfaces: List[str] = field(default_factory=list)
    attributes: List[AttributeInfo] = field(default_factory=list)
    methods: List[MethodDeclaration] = field(default_factory=list)
    fields: List[FieldRecord] = field(default_factory=list)
    properties: List[PropertyDeclaration] = field(default_factory=list)
    events: List[EventDeclaration] = field(default_factory=list)
    nested_types: List["ClassifiedType"] = field(default_factory=list)
    enum_values: List[str] = field(default_factory=list)

    def iter_types(self) -> Iterator["ClassifiedType"]:
        """Yield this type followed by all nested types, depth first."""
        yield self
        for nested in self.nested_types:
            yield from nested.iter_types()


@dataclass
class FileRecord:
    """Analysis result for a single source file."""

    name: str
    relative_path: str
    namespace: Optional[str] = None
    usings: List[str] = field(default_factory=list)
    types: List[ClassifiedType] = field(default_factory=list)

    def iter_types(self) -> Iterator[ClassifiedType]:
        for declared in self.types:
            yield from declared.iter_types()

    @property
    def type_count(self) -> int:
        return sum(1 for _ in self.iter_types())


@dataclass
class DirectoryStats:
    total_scripts: int = 0
    monobehaviours: int = field(default=0, metadata={"key": "monoBehaviours"})
    scriptable_objects: int = 0
    interfaces: int = 0
    editor_scripts: int = 0
    plain_types: int = field(default=0, metadata={"key": "pureCSharp"})
    enums: int = 0


@dataclass
class DirectoryDependencies:
    uses_namespaces: List[str] = field(default_factory=list)
    referenced_directories: List[str] = field(default_factory=list)


@dataclass
class DirectoryRecord:
    """One source-bearing directory; stats and namespaces derive from ``files``."""

    path: str
    asmdef: Optional[str] = None
    files: List[FileRecord] = field(default_factory=list)
    stats: DirectoryStats = field(default_factory=DirectoryStats)
    dependencies: DirectoryDependencies = field(default_factory=DirectoryDependencies)

    def declared_namespaces(self) -> List[str]:
        """Distinct namespaces declared by files in this directory, in file order."""
        seen: List[str] = []
        for record in self.files:
            if record.namespace is not None and record.namespace not in seen:
                seen.append(record.namespace)
        return seen

    @property
    def type_count(self) -> int:
        return sum(record.type_count for record in self.files)


@dataclass
class ProjectModel:
    """Top-level analysis document."""

    project_path: str
    analyzed_at: str
    total_files: int = 0
    total_types: int = 0
    directories: List[DirectoryRecord] = field(default_factory=list)

    def refresh_totals(self) -> None:
        self.total_files = sum(len(directory.files) for directory in self.directories)
        self.total_types = sum(directory.type_count for directory in self.directories)

    def to_dict(self) -> Dict[str, Any]:
        return as_payload(self)

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def as_payload(value: Any) -> Any:
    """Convert models to JSON-ready data with camelCase keys, dropping None values."""
    if is_dataclass(value) and not isinstance(value, type):
        payload: Dict[str, Any] = {}
        for item in fields(value):
            attribute = getattr(value, item.name)
            if attribute is None:
                continue
            key = item.metadata.get("key") or _camel_case(item.name)
            payload[key] = as_payload(attribute)
        return payload
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [as_payload(item) for item in value]
    return value


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


__all__ = [
    "Category",
    "ClassifiedType",
    "DirectoryDependencies",
    "DirectoryRecord",
    "DirectoryStats",
    "FieldRecord",
    "FileRecord",
    "ProjectModel",
    "as_payload",
]
