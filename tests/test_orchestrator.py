"""End-to-end tests for the analysis pipeline."""

from __future__ import annotations

import json
import re

import pytest

from csmap.config import CSMapConfig
from csmap.models import Category
from csmap.orchestrator import Orchestrator


def _directory(project, path):
    return next(directory for directory in project.directories if directory.path == path)


def test_cross_directory_dependency_is_resolved(project_builder) -> None:
    project_builder.write(
        {
            "Core/Service.cs": """
                namespace Game.Core
                {
                    public class Service {}
                }
            """,
            "Gameplay/Player.cs": """
                using UnityEngine;
                using Game.Core;

                namespace Game.Play
                {
                    public class Player : MonoBehaviour
                    {
                        [SerializeField] private float speed;
                        private Service service;
                    }
                }
            """,
        }
    )

    project = project_builder.analyze()

    assert [directory.path for directory in project.directories] == ["Core", "Gameplay"]
    core = _directory(project, "Core")
    gameplay = _directory(project, "Gameplay")
    assert gameplay.dependencies.referenced_directories == ["Core"]
    assert gameplay.dependencies.uses_namespaces == ["Game.Core", "UnityEngine"]
    assert core.dependencies.referenced_directories == []
    assert gameplay.stats.monobehaviours == 1
    assert core.stats.plain_types == 1

    player = gameplay.files[0].types[0]
    assert player.category is Category.MONO_BEHAVIOUR_LIKE
    assert [field.is_exposed_state for field in player.fields] == [True, False]


def test_external_only_imports_have_no_references(project_builder) -> None:
    project_builder.write(
        {
            "UI/Hud.cs": """
                using System.Collections.Generic;
                using UnityEngine.UI;
                using TMPro;

                namespace Game.UI
                {
                    public class Hud : UnityEngine.MonoBehaviour {}
                }
            """,
            "Data/Item.cs": """
                namespace Game.Data
                {
                    public class Item : ScriptableObject {}
                }
            """,
        }
    )

    project = project_builder.analyze()

    assert _directory(project, "UI").dependencies.referenced_directories == []
    assert _directory(project, "Data").stats.scriptable_objects == 1


def test_undecodable_file_is_skipped(project_builder) -> None:
    project_builder.write(
        {
            "Scripts/Good.cs": """
                public class Good {}
            """,
        }
    )
    project_builder.write_bytes("Scripts/Bad.cs", b"public class \xff\xfe Bad {}")

    project = project_builder.analyze()

    scripts = _directory(project, "Scripts")
    assert [record.name for record in scripts.files] == ["Good.cs"]
    assert scripts.stats.total_scripts == 1
    assert project.total_files == 1


def test_directory_with_only_failures_is_omitted(project_builder) -> None:
    project_builder.write({"Ok/Fine.cs": "public class Fine {}\n"})
    project_builder.write_bytes("Broken/Bad.cs", b"\xff\xff\xff")

    project = project_builder.analyze()

    assert [directory.path for directory in project.directories] == ["Ok"]


def test_root_files_are_reported_under_dot(project_builder) -> None:
    project_builder.write({"Root.cs": "public class Root {}\n"})

    project = project_builder.analyze()

    assert [directory.path for directory in project.directories] == ["."]


def test_parallel_analysis_matches_sequential(project_builder) -> None:
    files = {}
    for index in range(8):
        files[f"Module{index % 3}/Type{index}.cs"] = f"""
            using Game.Module{(index + 1) % 3};

            namespace Game.Module{index % 3}
            {{
                public class Type{index} : MonoBehaviour {{}}
            }}
        """
    project_builder.write(files)

    sequential = project_builder.analyze(workers=1).to_dict()
    parallel = project_builder.analyze(workers=4).to_dict()
    sequential.pop("analyzedAt")
    parallel.pop("analyzedAt")

    assert parallel == sequential
    assert sequential["directories"][0]["dependencies"]["referencedDirectories"] == ["Module1"]


def test_assets_directory_is_used_as_root(project_builder) -> None:
    project_builder.write(
        {
            "Assets/Scripts/Enemy.cs": "public class Enemy : MonoBehaviour {}\n",
            "Assets/Scripts/Game.Scripts.asmdef": '{"name": "Game.Scripts"}',
            "Library/Cache.cs": "public class Cache {}\n",
        }
    )

    project = project_builder.analyze()

    assert project.project_path.endswith("Assets")
    assert [directory.path for directory in project.directories] == ["Scripts"]
    assert project.directories[0].asmdef == "Game.Scripts"


def test_totals_and_timestamp(project_builder) -> None:
    project_builder.write(
        {
            "A/One.cs": """
                public class One
                {
                    public enum Kind { A, B }
                    public struct Pair {}
                }
            """,
            "B/Two.cs": "public interface ITwo {}\n",
        }
    )

    project = project_builder.analyze()

    assert project.total_files == 2
    assert project.total_types == 4
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", project.analyzed_at)
    document = json.loads(project.to_json())
    assert document["totalFiles"] == 2
    assert document["directories"][0]["stats"]["enums"] == 1


def test_config_in_project_extends_classification(project_builder) -> None:
    project_builder.write(
        {
            ".csmap.yml": """
                classification:
                  lifecycle_types: [GameBehaviour]
                external_namespaces: [Vendor]
            """,
            "Plugins/Sdk.cs": "namespace Vendor.Sdk { public class Client {} }\n",
            "Game/Hero.cs": """
                using Vendor.Sdk;

                namespace Game
                {
                    public class Hero : GameBehaviour {}
                }
            """,
        }
    )

    project = project_builder.analyze()

    game = _directory(project, "Game")
    assert game.files[0].types[0].category is Category.MONO_BEHAVIOUR_LIKE
    assert game.dependencies.referenced_directories == []


def test_explicit_config_takes_precedence(project_builder) -> None:
    project_builder.write({"A/One.cs": "public class One {}\n"})
    config = CSMapConfig(root=project_builder.path(), exclude_dirs=["A"])

    project = Orchestrator(config).run_analysis(project_builder.path())

    assert project.directories == []
    assert project.total_files == 0


def test_missing_path_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError, match="does not exist"):
        Orchestrator().run_analysis(tmp_path / "missing")


def test_unparseable_file_does_not_count_toward_stats(project_builder) -> None:
    project_builder.write(
        {
            "Core/Service.cs": "namespace Game.Core { public class Service {} }\n",
            "Core/Garbage.cs": "}}}}\n}}\n",
        }
    )

    project = project_builder.analyze()

    core = _directory(project, "Core")
    assert [record.name for record in core.files] == ["Service.cs"]
    assert core.stats.total_scripts == 1
