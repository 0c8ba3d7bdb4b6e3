"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from csmap.orchestrator import Orchestrator
from csmap.service import create_app


class _RecordingOrchestrator(Orchestrator):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[dict[str, object]] = []

    def run_analysis(self, path, *, workers=None):
        self.calls.append({"path": path, "workers": workers})
        return super().run_analysis(path, workers=workers)


def test_health_endpoint() -> None:
    client = TestClient(create_app())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_endpoint_returns_document(project_builder) -> None:
    project_builder.write(
        {
            "Core/Api.cs": "namespace Game.Core { public interface IApi {} }\n",
            "Game/Client.cs": "using Game.Core;\nnamespace Game.Client { public class Client : IApi {} }\n",
        }
    )
    orchestrator = _RecordingOrchestrator()
    client = TestClient(create_app(lambda: orchestrator))

    response = client.post("/analyze", json={"path": str(project_builder.path()), "workers": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["totalFiles"] == 2
    directories = {entry["path"]: entry for entry in body["directories"]}
    assert directories["Game"]["dependencies"]["referencedDirectories"] == ["Core"]
    assert directories["Core"]["stats"]["interfaces"] == 1
    assert orchestrator.calls == [{"path": str(project_builder.path()), "workers": 2}]


def test_analyze_missing_path_returns_404(tmp_path: Path) -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"path": str(tmp_path / "missing")})

    assert response.status_code == 404
    assert "does not exist" in response.json()["detail"]


def test_analyze_file_path_returns_400(tmp_path: Path) -> None:
    target = tmp_path / "Single.cs"
    target.write_text("class Single {}\n", encoding="utf-8")
    client = TestClient(create_app())

    response = client.post("/analyze", json={"path": str(target)})

    assert response.status_code == 400


def test_analyze_rejects_invalid_worker_count(tmp_path: Path) -> None:
    client = TestClient(create_app())

    response = client.post("/analyze", json={"path": str(tmp_path), "workers": 0})

    assert response.status_code == 422
