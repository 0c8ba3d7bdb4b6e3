"""Heuristic classification of C# types and their serialized fields."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, Optional

from ..models import Category
from ..syntax.nodes import EnumDeclaration, FieldDeclaration, TypeDeclaration

LIFECYCLE_BASE_TYPES: FrozenSet[str] = frozenset(
    {
        "MonoBehaviour",
        "NetworkBehaviour",
        "StateMachineBehaviour",
        "UIBehaviour",
        "Graphic",
        "MaskableGraphic",
        "Selectable",
        "Button",
        "Toggle",
        "Slider",
        "Scrollbar",
        "InputField",
        "Image",
        "RawImage",
        "Text",
    }
)

ASSET_BASE_TYPES: FrozenSet[str] = frozenset({"ScriptableObject", "ScriptableSingleton"})

TOOLING_BASE_TYPES: FrozenSet[str] = frozenset(
    {
        "Editor",
        "EditorWindow",
        "PropertyDrawer",
        "DecoratorDrawer",
        "ScriptableWizard",
        "AssetPostprocessor",
        "AssetModificationProcessor",
    }
)

SERIALIZATION_MARKERS: FrozenSet[str] = frozenset({"SerializeField", "SerializeReference"})

NON_SERIALIZED_MARKER = "NonSerialized"

EDITOR_NAMESPACE_HINT = "Editor"


@dataclass(frozen=True)
class ClassifierRules:
    """Lookup sets consulted by :class:`TypeClassifier`."""

    lifecycle_types: FrozenSet[str] = LIFECYCLE_BASE_TYPES
    asset_types: FrozenSet[str] = ASSET_BASE_TYPES
    tooling_types: FrozenSet[str] = TOOLING_BASE_TYPES

    def extended(
        self,
        *,
        lifecycle_types: Iterable[str] = (),
        asset_types: Iterable[str] = (),
        tooling_types: Iterable[str] = (),
    ) -> "ClassifierRules":
        """Return a copy with extra base type names added to each set."""
        return replace(
            self,
            lifecycle_types=self.lifecycle_types | frozenset(lifecycle_types),
            asset_types=self.asset_types | frozenset(asset_types),
            tooling_types=self.tooling_types | frozenset(tooling_types),
        )


def simple_type_name(name: str) -> str:
    """Strip namespace qualifiers and generic arguments: ``A.B.Pool<T>`` -> ``Pool``."""
    head = name.split("<", 1)[0]
    head = head.rsplit(".", 1)[-1]
    return head.rsplit("::", 1)[-1].strip()


def simple_attribute_name(name: str) -> str:
    simple = simple_type_name(name)
    if simple.endswith("Attribute") and simple != "Attribute":
        return simple[: -len("Attribute")]
    return simple


class TypeClassifier:
    """Assigns a :class:`Category` to declarations and decides field exposure."""

    def __init__(self, rules: ClassifierRules | None = None) -> None:
        self.rules = rules or ClassifierRules()

    def classify(
        self,
        declaration: TypeDeclaration | EnumDeclaration,
        enclosing_namespace: Optional[str],
    ) -> Category:
        if declaration.kind == "interface":
            return Category.INTERFACE_KIND
        base_type = getattr(declaration, "base_type", None)
        if not base_type:
            return Category.PLAIN_TYPE

        simple_base = simple_type_name(base_type)
        if simple_base in self.rules.lifecycle_types:
            return Category.MONO_BEHAVIOUR_LIKE
        if simple_base in self.rules.asset_types:
            return Category.DATA_ASSET_LIKE
        if simple_base in self.rules.tooling_types:
            return Category.EDITOR_TOOLING

        # Lifecycle and asset bases win over the namespace hint even under Editor folders.
        if enclosing_namespace and EDITOR_NAMESPACE_HINT in enclosing_namespace:
            return Category.EDITOR_TOOLING
        return Category.PLAIN_TYPE

    @staticmethod
    def is_exposed_state(declaration: FieldDeclaration) -> bool:
        names = {simple_attribute_name(attribute.name) for attribute in declaration.attributes}
        if names & SERIALIZATION_MARKERS:
            return True

        modifiers = set(declaration.modifiers)
        return (
            "public" in modifiers
            and not modifiers & {"static", "readonly", "const"}
            and NON_SERIALIZED_MARKER not in names
        )


__all__ = [
    "ASSET_BASE_TYPES",
    "ClassifierRules",
    "LIFECYCLE_BASE_TYPES",
    "SERIALIZATION_MARKERS",
    "TOOLING_BASE_TYPES",
    "TypeClassifier",
    "simple_type_name",
]
