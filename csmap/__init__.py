"""csmap: structural map of C# (Unity) projects."""

__version__ = "0.1.0"
