"""Classification, aggregation and dependency resolution stages."""

from __future__ import annotations

from .classifier import ClassifierRules, TypeClassifier
from .dependencies import DependencyResolver, build_namespace_ownership, find_owner
from .directories import DirectoryAnalyzer
from .files import FileAnalyzer

__all__ = [
    "ClassifierRules",
    "DependencyResolver",
    "DirectoryAnalyzer",
    "FileAnalyzer",
    "TypeClassifier",
    "build_namespace_ownership",
    "find_owner",
]
