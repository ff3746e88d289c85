from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_install_does_not_publish_backend_modules_at_top_level():
    pyproject = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    setuptools = pyproject["tool"]["setuptools"]

    assert setuptools["py-modules"] == []
    assert setuptools["packages"] == []
    assert "package-dir" not in setuptools
