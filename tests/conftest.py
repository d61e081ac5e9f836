import shutil
from pathlib import Path
from typing import Optional

import pytest
import yaml
from fastapi.testclient import TestClient

from smartbuild.api.main import app
from smartbuild.core.observability.audit import close_audit_handlers
from smartbuild.core.observability.metrics import reset_metrics

SAMPLES_DIR = Path(__file__).resolve().parents[1] / "samples"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    # Keep runs deterministic regardless of the developer's shell.
    for key in (
        "SMARTBUILD_PROJECT_ROOT",
        "SMARTBUILD_POLICY_FILE",
        "SMARTBUILD_BACKEND",
        "SMARTBUILD_OUTPUT_DIR",
        "SMARTBUILD_AUDIT_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_metrics()
    yield
    close_audit_handlers()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def sample_project(tmp_path: Path) -> Path:
    """A copy of samples/flow_controller that tests may modify."""
    root = tmp_path / "flow_controller"
    shutil.copytree(SAMPLES_DIR / "flow_controller", root)
    return root


@pytest.fixture()
def make_project(tmp_path: Path):
    """
    Writes a minimal project:
      <root>/dictionaries/data_dictionary.py
      <root>/models/controller_model.yaml
      <root>/smartbuild.yaml (optional)
    """

    def _make(dictionary: str, model: dict, policy: Optional[dict] = None, name: str = "proj") -> Path:
        root = tmp_path / name
        (root / "dictionaries").mkdir(parents=True, exist_ok=True)
        (root / "models").mkdir(parents=True, exist_ok=True)
        (root / "dictionaries" / "data_dictionary.py").write_text(dictionary, encoding="utf-8")
        (root / "models" / "controller_model.yaml").write_text(
            yaml.safe_dump(model, sort_keys=False), encoding="utf-8"
        )
        if policy is not None:
            (root / "smartbuild.yaml").write_text(yaml.safe_dump(policy), encoding="utf-8")
        return root

    return _make
