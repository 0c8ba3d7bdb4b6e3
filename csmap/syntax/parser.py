"""Tree-sitter powered C# declaration parser."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional

import tree_sitter_c_sharp
from tree_sitter import Language, Node, Parser

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

CSHARP_LANGUAGE = Language(tree_sitter_c_sharp.language())

_TYPE_NODE_KINDS = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "struct_declaration": "struct",
    "record_declaration": "record",
    "record_struct_declaration": "record",
}

_NAME_NODE_TYPES = {
    "identifier",
    "qualified_name",
    "generic_name",
    "alias_qualified_name",
}

_PARAMETER_MODIFIERS = {"ref", "out", "in", "params", "this", "scoped"}

_COROUTINE_RETURN_TYPES = {"IEnumerator", "IEnumerable"}


class SourceParseError(ValueError):
    """Raised when a source file cannot be turned into a syntax tree."""


class CSharpParser:
    """Extracts usings and the type declaration tree from C# source.

    A parser instance wraps one tree-sitter parser and is not safe to share
    across threads.
    """

    def __init__(self) -> None:
        self._parser = Parser(CSHARP_LANGUAGE)

    def parse_file(self, path: Path) -> ParsedSource:
        try:
            source = path.read_bytes().decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SourceParseError(f"{path.name} is not valid UTF-8: {exc}") from exc
        return self.parse(source)

    def parse(self, source: str) -> ParsedSource:
        tree = self._parser.parse(source.encode("utf-8"))
        root = tree.root_node
        usings: List[str] = []
        members = self._collect_members(root, usings)
        if root.has_error and not usings and not members:
            raise SourceParseError("no declarations could be recovered from the syntax tree")
        return ParsedSource(usings=usings, members=members, has_errors=root.has_error)

    # ------------------------------------------------------------------
    # Compilation unit and namespaces

    def _collect_members(self, container: Node, usings: List[str]) -> List[Declaration]:
        members: List[Declaration] = []
        scoped_name: Optional[str] = None
        scoped_members: List[Declaration] = []
        for child in container.named_children:
            if child.type == "file_scoped_namespace_declaration":
                scoped_name = _text(child.child_by_field_name("name"))
                # Older grammars nest the covered members inside the declaration itself.
                scoped_members.extend(self._collect_members(child, usings))
                continue
            self._visit(child, scoped_members if scoped_name is not None else members, usings)
        if scoped_name is not None:
            members.append(
                NamespaceGroup(name=scoped_name, members=tuple(scoped_members), file_scoped=True)
            )
        return members

    def _visit(self, node: Node, out: List[Declaration], usings: List[str]) -> None:
        if node.type == "using_directive":
            name = _using_target(node)
            if name:
                usings.append(name)
        elif node.type == "namespace_declaration":
            body = node.child_by_field_name("body") or _first_child(node, "declaration_list")
            members = self._collect_members(body, usings) if body is not None else []
            out.append(
                NamespaceGroup(name=_text(node.child_by_field_name("name")), members=tuple(members))
            )
        elif node.type in _TYPE_NODE_KINDS:
            out.append(self._type_declaration(node, _TYPE_NODE_KINDS[node.type]))
        elif node.type == "enum_declaration":
            out.append(self._enum_declaration(node))
        elif node.type.startswith("preproc_"):
            for child in node.named_children:
                self._visit(child, out, usings)
        elif node.type == "ERROR":
            self._recover(node, out, usings)

    def _recover(self, node: Node, out: List[Declaration], usings: List[str]) -> None:
        """Salvage declarations from an ERROR node.

        A namespace whose block failed to parse shows up as a bare ``namespace``
        token followed by its name; declarations after it are grouped under it.
        """
        group_name: Optional[str] = None
        group_members: List[Declaration] = []
        children = node.children
        for index, child in enumerate(children):
            if child.type == "namespace" and group_name is None:
                following = children[index + 1] if index + 1 < len(children) else None
                if following is not None and following.type in _NAME_NODE_TYPES:
                    group_name = _text(following)
                continue
            self._visit(child, group_members if group_name is not None else out, usings)
        if group_name is not None:
            out.append(NamespaceGroup(name=group_name, members=tuple(group_members)))

    # ------------------------------------------------------------------
    # Type declarations

    def _type_declaration(self, node: Node, kind: str) -> TypeDeclaration:
        bases = _base_entries(node)
        if kind == "interface":
            base_type = None
            interfaces = tuple(bases)
        else:
            base_type = bases[0] if bases else None
            interfaces = tuple(bases[1:])

        fields: List[FieldDeclaration] = []
        methods: List[MethodDeclaration] = []
        properties: List[PropertyDeclaration] = []
        events: List[EventDeclaration] = []
        nested: List[Declaration] = []

        body = node.child_by_field_name("body") or _first_child(node, "declaration_list")
        for member in _iter_members(body):
            if member.type == "field_declaration":
                fields.extend(_field_declarations(member))
            elif member.type == "method_declaration":
                methods.append(_method_declaration(member))
            elif member.type == "constructor_declaration":
                methods.append(_constructor_declaration(member))
            elif member.type == "property_declaration":
                properties.append(_property_declaration(member))
            elif member.type == "event_field_declaration":
                events.extend(_event_field_declarations(member))
            elif member.type == "event_declaration":
                events.append(
                    EventDeclaration(
                        name=_text(member.child_by_field_name("name")),
                        type=_text(member.child_by_field_name("type")),
                        modifiers=_modifiers(member),
                    )
                )
            elif member.type in _TYPE_NODE_KINDS:
                nested.append(self._type_declaration(member, _TYPE_NODE_KINDS[member.type]))
            elif member.type == "enum_declaration":
                nested.append(self._enum_declaration(member))

        return TypeDeclaration(
            name=_text(node.child_by_field_name("name")) + _type_parameter_suffix(node),
            kind=kind,
            modifiers=_modifiers(node),
            base_type=base_type,
            interfaces=interfaces,
            attributes=_attributes(node),
            fields=tuple(fields),
            methods=tuple(methods),
            properties=tuple(properties),
            events=tuple(events),
            nested_types=tuple(nested),
        )

    def _enum_declaration(self, node: Node) -> EnumDeclaration:
        body = node.child_by_field_name("body") or _first_child(node, "enum_member_declaration_list")
        members = [
            _text(member.child_by_field_name("name"))
            for member in _iter_members(body)
            if member.type == "enum_member_declaration"
        ]
        return EnumDeclaration(
            name=_text(node.child_by_field_name("name")),
            modifiers=_modifiers(node),
            attributes=_attributes(node),
            members=tuple(members),
        )


# ----------------------------------------------------------------------
# Node helpers


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return " ".join(node.text.decode("utf-8", errors="replace").split())


def _first_child(node: Node, node_type: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _iter_members(body: Optional[Node]) -> Iterator[Node]:
    if body is None:
        return
    for child in body.named_children:
        if child.type.startswith("preproc_") or child.type == "ERROR":
            yield from _iter_members(child)
        else:
            yield child


def _using_target(node: Node) -> str:
    # The last name-like child is the imported target, also for aliases and `using static`.
    target = None
    for child in node.named_children:
        if child.type in _NAME_NODE_TYPES:
            target = child
    return _text(target)


def _modifiers(node: Node) -> tuple[str, ...]:
    return tuple(_text(child) for child in node.children if child.type == "modifier")


def _attributes(node: Node) -> tuple[AttributeInfo, ...]:
    attributes: List[AttributeInfo] = []
    for attribute_list in node.children:
        if attribute_list.type != "attribute_list":
            continue
        for attribute in attribute_list.named_children:
            if attribute.type != "attribute":
                continue
            arguments: tuple[str, ...] = ()
            argument_list = _first_child(attribute, "attribute_argument_list")
            if argument_list is not None:
                arguments = tuple(
                    _text(argument)
                    for argument in argument_list.named_children
                    if argument.type == "attribute_argument"
                )
            attributes.append(
                AttributeInfo(name=_text(attribute.child_by_field_name("name")), arguments=arguments)
            )
    return tuple(attributes)


def _base_entries(node: Node) -> List[str]:
    base_list = node.child_by_field_name("bases") or _first_child(node, "base_list")
    if base_list is None:
        return []
    entries: List[str] = []
    for child in base_list.named_children:
        if child.type in {"argument_list", "comment"}:
            continue
        if child.type == "primary_constructor_base_type":
            type_node = child.child_by_field_name("type") or (
                child.named_children[0] if child.named_children else None
            )
            entries.append(_text(type_node))
            continue
        entries.append(_text(child))
    return entries


def _type_parameter_names(node: Node) -> List[str]:
    parameter_list = node.child_by_field_name("type_parameters") or _first_child(
        node, "type_parameter_list"
    )
    if parameter_list is None:
        return []
    names: List[str] = []
    for parameter in parameter_list.named_children:
        if parameter.type != "type_parameter":
            continue
        name_node = parameter.child_by_field_name("name") or _last_identifier(parameter)
        names.append(_text(name_node))
    return names


def _type_parameter_suffix(node: Node) -> str:
    names = _type_parameter_names(node)
    return f"<{', '.join(names)}>" if names else ""


def _last_identifier(node: Node) -> Optional[Node]:
    found = None
    for child in node.named_children:
        if child.type == "identifier":
            found = child
    return found


def _variable_declarators(node: Node) -> tuple[str, List[str]]:
    declaration = _first_child(node, "variable_declaration")
    if declaration is None:
        return "", []
    type_text = _text(declaration.child_by_field_name("type"))
    names = []
    for declarator in declaration.named_children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name") or _first_child(declarator, "identifier")
        names.append(_text(name_node))
    return type_text, names


def _field_declarations(node: Node) -> List[FieldDeclaration]:
    type_text, names = _variable_declarators(node)
    modifiers = _modifiers(node)
    attributes = _attributes(node)
    return [
        FieldDeclaration(name=name, type=type_text, modifiers=modifiers, attributes=attributes)
        for name in names
    ]


def _event_field_declarations(node: Node) -> List[EventDeclaration]:
    type_text, names = _variable_declarators(node)
    modifiers = _modifiers(node)
    return [EventDeclaration(name=name, type=type_text, modifiers=modifiers) for name in names]


def _parameters(node: Node) -> tuple[ParameterInfo, ...]:
    parameter_list = node.child_by_field_name("parameters") or _first_child(node, "parameter_list")
    if parameter_list is None:
        return ()
    parameters: List[ParameterInfo] = []
    for parameter in parameter_list.named_children:
        if parameter.type not in {"parameter", "parameter_array"}:
            continue
        type_node = parameter.child_by_field_name("type")
        name_node = parameter.child_by_field_name("name") or _last_identifier(parameter)
        default_value = None
        equals_clause = _first_child(parameter, "equals_value_clause")
        if equals_clause is not None and equals_clause.named_children:
            default_value = _text(equals_clause.named_children[0])
        parameters.append(
            ParameterInfo(
                name=_text(name_node),
                type=_text(type_node) or "var",
                default_value=default_value,
                modifier=_parameter_modifier(parameter),
            )
        )
    return tuple(parameters)


def _parameter_modifier(parameter: Node) -> Optional[str]:
    if parameter.type == "parameter_array":
        return "params"
    for child in parameter.children:
        if child.type in {"modifier", "parameter_modifier"} or child.type in _PARAMETER_MODIFIERS:
            return _text(child)
    return None


def _method_declaration(node: Node) -> MethodDeclaration:
    return_type = _text(node.child_by_field_name("returns") or node.child_by_field_name("type"))
    modifiers = _modifiers(node)
    return MethodDeclaration(
        name=_text(node.child_by_field_name("name")),
        return_type=return_type,
        modifiers=modifiers,
        type_parameters=tuple(_type_parameter_names(node)),
        parameters=_parameters(node),
        attributes=_attributes(node),
        is_coroutine=return_type in _COROUTINE_RETURN_TYPES,
        is_async="async" in modifiers,
    )


def _constructor_declaration(node: Node) -> MethodDeclaration:
    return MethodDeclaration(
        name=".ctor",
        return_type="void",
        modifiers=_modifiers(node),
        parameters=_parameters(node),
        attributes=_attributes(node),
    )


def _property_declaration(node: Node) -> PropertyDeclaration:
    accessors = node.child_by_field_name("accessors") or _first_child(node, "accessor_list")
    if accessors is not None:
        kinds = set()
        for accessor in accessors.named_children:
            if accessor.type != "accessor_declaration":
                continue
            kinds.update(child.type for child in accessor.children)
            kinds.add(_text(accessor.child_by_field_name("name")))
        has_getter = "get" in kinds
        has_setter = "set" in kinds or "init" in kinds
    else:
        has_getter = _first_child(node, "arrow_expression_clause") is not None
        has_setter = False
    return PropertyDeclaration(
        name=_text(node.child_by_field_name("name")),
        type=_text(node.child_by_field_name("type")),
        modifiers=_modifiers(node),
        has_getter=has_getter,
        has_setter=has_setter,
        attributes=_attributes(node),
    )


__all__ = ["CSharpParser", "CSHARP_LANGUAGE", "SourceParseError"]
