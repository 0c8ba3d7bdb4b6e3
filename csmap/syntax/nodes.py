"""Declaration tree produced by the C# parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class AttributeInfo:
    """An attribute application such as ``[Range(0, 10)]``."""

    name: str
    arguments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    type: str
    default_value: Optional[str] = None
    modifier: Optional[str] = None


@dataclass(frozen=True)
class MethodDeclaration:
    name: str
    return_type: str
    modifiers: Tuple[str, ...] = ()
    type_parameters: Tuple[str, ...] = ()
    parameters: Tuple[ParameterInfo, ...] = ()
    attributes: Tuple[AttributeInfo, ...] = ()
    is_coroutine: bool = False
    is_async: bool = False


@dataclass(frozen=True)
class FieldDeclaration:
    """A single field variable; ``int a, b;`` yields two declarations."""

    name: str
    type: str
    modifiers: Tuple[str, ...] = ()
    attributes: Tuple[AttributeInfo, ...] = ()


@dataclass(frozen=True)
class PropertyDeclaration:
    name: str
    type: str
    modifiers: Tuple[str, ...] = ()
    has_getter: bool = False
    has_setter: bool = False
    attributes: Tuple[AttributeInfo, ...] = ()


@dataclass(frozen=True)
class EventDeclaration:
    name: str
    type: str
    modifiers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TypeDeclaration:
    """A class, interface, struct or record declaration."""

    name: str
    kind: str
    modifiers: Tuple[str, ...] = ()
    base_type: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    attributes: Tuple[AttributeInfo, ...] = ()
    fields: Tuple[FieldDeclaration, ...] = ()
    methods: Tuple[MethodDeclaration, ...] = ()
    properties: Tuple[PropertyDeclaration, ...] = ()
    events: Tuple[EventDeclaration, ...] = ()
    nested_types: Tuple["Declaration", ...] = ()


@dataclass(frozen=True)
class EnumDeclaration:
    name: str
    modifiers: Tuple[str, ...] = ()
    attributes: Tuple[AttributeInfo, ...] = ()
    members: Tuple[str, ...] = ()

    kind = "enum"


@dataclass(frozen=True)
class NamespaceGroup:
    """A namespace block, or a file-scoped namespace and the members it covers."""

    name: str
    members: Tuple["Declaration", ...] = ()
    file_scoped: bool = False


Declaration = Union[NamespaceGroup, TypeDeclaration, EnumDeclaration]


@dataclass
class ParsedSource:
    """Everything the parser extracts from one compilation unit."""

    usings: List[str] = field(default_factory=list)
    members: List[Declaration] = field(default_factory=list)
    has_errors: bool = False


__all__ = [
    "AttributeInfo",
    "Declaration",
    "EnumDeclaration",
    "EventDeclaration",
    "FieldDeclaration",
    "MethodDeclaration",
    "NamespaceGroup",
    "ParameterInfo",
    "ParsedSource",
    "PropertyDeclaration",
    "TypeDeclaration",
]
