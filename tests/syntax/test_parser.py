"""Tests for the tree-sitter C# parser."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from csmap.syntax import (
    CSharpParser,
    EnumDeclaration,
    NamespaceGroup,
    SourceParseError,
    TypeDeclaration,
)


def _parse(source: str):
    return CSharpParser().parse(textwrap.dedent(source).lstrip("\n"))


def test_parse_collects_usings_in_document_order() -> None:
    parsed = _parse(
        """
        using UnityEngine;
        using Game.Core;
        using Helpers = Game.Util.Helpers;
        using static Game.Math.Functions;
        using Game.Core;

        public class Foo {}
        """
    )

    assert parsed.usings == [
        "UnityEngine",
        "Game.Core",
        "Game.Util.Helpers",
        "Game.Math.Functions",
        "Game.Core",
    ]


def test_parse_builds_namespace_groups() -> None:
    parsed = _parse(
        """
        namespace Game.Core
        {
            public class Service {}
            public interface IService {}
        }
        """
    )

    assert len(parsed.members) == 1
    group = parsed.members[0]
    assert isinstance(group, NamespaceGroup)
    assert group.name == "Game.Core"
    assert group.file_scoped is False
    assert [member.name for member in group.members] == ["Service", "IService"]
    assert [member.kind for member in group.members] == ["class", "interface"]


def test_parse_file_scoped_namespace_covers_following_types() -> None:
    parsed = _parse(
        """
        using Game.Core;

        namespace Game.Play;

        public class Player {}
        public enum Team { Red, Blue }
        """
    )

    groups = [member for member in parsed.members if isinstance(member, NamespaceGroup)]
    assert len(groups) == 1
    assert groups[0].file_scoped is True
    assert groups[0].name == "Game.Play"
    assert [member.name for member in groups[0].members] == ["Player", "Team"]
    assert parsed.usings == ["Game.Core"]


def test_parse_splits_base_type_and_interfaces() -> None:
    parsed = _parse(
        """
        public class Player : MonoBehaviour, IDamageable, IHealable {}
        public interface IDamageable : IEntity, IDisposable {}
        """
    )

    player, damageable = parsed.members
    assert isinstance(player, TypeDeclaration)
    assert player.base_type == "MonoBehaviour"
    assert player.interfaces == ("IDamageable", "IHealable")
    assert damageable.base_type is None
    assert damageable.interfaces == ("IEntity", "IDisposable")


def test_parse_keeps_qualified_and_generic_base_names() -> None:
    parsed = _parse(
        """
        public class Spawner<T> : UnityEngine.MonoBehaviour where T : class {}
        """
    )

    spawner = parsed.members[0]
    assert spawner.name == "Spawner<T>"
    assert spawner.base_type == "UnityEngine.MonoBehaviour"


def test_parse_extracts_fields_with_modifiers_and_attributes() -> None:
    parsed = _parse(
        """
        public class Stats
        {
            [SerializeField] private float speed;
            [Range(0, 10)] public int level;
            public int health, mana;
            public static readonly int Max = 99;
        }
        """
    )

    fields = {field.name: field for field in parsed.members[0].fields}
    assert list(fields) == ["speed", "level", "health", "mana", "Max"]
    assert fields["speed"].type == "float"
    assert fields["speed"].modifiers == ("private",)
    assert [attribute.name for attribute in fields["speed"].attributes] == ["SerializeField"]
    assert fields["level"].attributes[0].name == "Range"
    assert fields["level"].attributes[0].arguments == ("0", "10")
    assert fields["mana"].modifiers == ("public",)
    assert fields["Max"].modifiers == ("public", "static", "readonly")


def test_parse_extracts_methods_and_constructors() -> None:
    parsed = _parse(
        """
        public class Loader
        {
            public Loader(string path) {}
            private IEnumerator Spawn() { yield return null; }
            public async Task<int> LoadAsync(int count, string label) { return count; }
            public T Get<T>() { return default; }
        }
        """
    )

    methods = {method.name: method for method in parsed.members[0].methods}
    assert set(methods) == {".ctor", "Spawn", "LoadAsync", "Get"}

    spawn = methods["Spawn"]
    assert spawn.return_type == "IEnumerator"
    assert spawn.is_coroutine is True
    assert spawn.is_async is False

    load = methods["LoadAsync"]
    assert load.is_async is True
    assert load.return_type == "Task<int>"
    assert [(parameter.name, parameter.type) for parameter in load.parameters] == [
        ("count", "int"),
        ("label", "string"),
    ]

    assert methods["Get"].type_parameters == ("T",)
    ctor = methods[".ctor"]
    assert ctor.return_type == "void"
    assert [parameter.name for parameter in ctor.parameters] == ["path"]


def test_parse_extracts_properties_and_events() -> None:
    parsed = _parse(
        """
        public class Unit
        {
            public int Score { get; private set; }
            public bool IsDead => health <= 0;
            public string Id { get; init; }
            public event Action<int> OnDamaged;
        }
        """
    )

    unit = parsed.members[0]
    properties = {prop.name: prop for prop in unit.properties}
    assert properties["Score"].has_getter is True
    assert properties["Score"].has_setter is True
    assert properties["IsDead"].has_getter is True
    assert properties["IsDead"].has_setter is False
    assert properties["Id"].has_setter is True

    assert [(event.name, event.type) for event in unit.events] == [("OnDamaged", "Action<int>")]


def test_parse_keeps_nested_types_at_any_depth() -> None:
    parsed = _parse(
        """
        public class Outer
        {
            public class Inner
            {
                public enum Mode { Fast, Slow }
            }
            private struct Data {}
        }
        """
    )

    outer = parsed.members[0]
    assert [(nested.name, nested.kind) for nested in outer.nested_types] == [
        ("Inner", "class"),
        ("Data", "struct"),
    ]
    mode = outer.nested_types[0].nested_types[0]
    assert isinstance(mode, EnumDeclaration)
    assert mode.members == ("Fast", "Slow")


def test_parse_file_rejects_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "Broken.cs"
    path.write_bytes(b"\xff\xfe\x00\x81 class")

    with pytest.raises(SourceParseError):
        CSharpParser().parse_file(path)


def test_parse_file_accepts_byte_order_mark(tmp_path: Path) -> None:
    path = tmp_path / "Bom.cs"
    path.write_bytes("\ufeffnamespace Game { public class Bom {} }".encode("utf-8"))

    parsed = CSharpParser().parse_file(path)

    assert parsed.members[0].name == "Game"


def test_parse_recovers_declarations_around_syntax_errors() -> None:
    parsed = _parse(
        """
        using UnityEngine;

        namespace Game.Play
        {
            public class Player : MonoBehaviour
            {
                private int health
                public void Hit() {}
            }
        }
        """
    )

    assert parsed.has_errors is True
    assert parsed.usings == ["UnityEngine"]
    group = parsed.members[0]
    assert isinstance(group, NamespaceGroup)
    assert group.name == "Game.Play"
    assert [member.name for member in group.members] == ["Player"]


def test_parse_rejects_source_with_nothing_recoverable() -> None:
    with pytest.raises(SourceParseError, match="no declarations"):
        _parse("}}}}\n}}\n")


def test_parse_allows_empty_source() -> None:
    parsed = _parse("// nothing here yet\n")

    assert parsed.has_errors is False
    assert parsed.members == []
