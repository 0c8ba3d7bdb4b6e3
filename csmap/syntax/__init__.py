"""C# syntax model: declaration tree types and the tree-sitter parser."""

from .nodes import (
    AttributeInfo,
    Declaration,
    EnumDeclaration,
    EventDeclaration,
    FieldDeclaration,
    MethodDeclaration,
    NamespaceGroup,
    ParameterInfo,
    ParsedSource,
    PropertyDeclaration,
    TypeDeclaration,
)
from .parser import CSharpParser, SourceParseError

__all__ = [
    "AttributeInfo",
    "CSharpParser",
    "Declaration",
    "EnumDeclaration",
    "EventDeclaration",
    "FieldDeclaration",
    "MethodDeclaration",
    "NamespaceGroup",
    "ParameterInfo",
    "ParsedSource",
    "PropertyDeclaration",
    "SourceParseError",
    "TypeDeclaration",
]
