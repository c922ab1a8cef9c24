"""Pytest configuration for dep-trace tests.

Fixtures build small node_modules layouts under tmp_path. Each layout
fixture returns the root project directory.
"""

import json
from pathlib import Path

import pytest


def write_package(
    directory: Path,
    name: str,
    dependencies: dict[str, str] | None = None,
    dev_dependencies: dict[str, str] | None = None,
    index: bool = True,
    **fields,
) -> Path:
    """Create a package directory with a package.json (and index.js)."""
    directory.mkdir(parents=True, exist_ok=True)
    manifest = {"name": name, "version": "1.0.0", **fields}
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    if dev_dependencies is not None:
        manifest["devDependencies"] = dev_dependencies
    (directory / "package.json").write_text(json.dumps(manifest, indent=2))
    if index:
        (directory / "index.js").write_text(f"module.exports = {json.dumps(name)};\n")
    return directory


@pytest.fixture
def make_package():
    return write_package


@pytest.fixture
def simple_chain(tmp_path: Path) -> Path:
    """root -> pkg-a, plus pkg-phantom installed but never declared."""
    root = write_package(tmp_path / "simple-chain", "simple-chain", {"pkg-a": "^1.0.0"}, index=False)
    write_package(root / "node_modules" / "pkg-a", "pkg-a")
    write_package(root / "node_modules" / "pkg-phantom", "pkg-phantom")
    return root


@pytest.fixture
def nested_chain(tmp_path: Path) -> Path:
    """root -> pkg-a -> pkg-b, pkg-b only installed inside pkg-a."""
    root = write_package(tmp_path / "nested-chain", "nested-chain", {"pkg-a": "^1.0.0"}, index=False)
    pkg_a = write_package(root / "node_modules" / "pkg-a", "pkg-a", {"pkg-b": "^1.0.0"})
    write_package(pkg_a / "node_modules" / "pkg-b", "pkg-b")
    return root


@pytest.fixture
def circular_chain(tmp_path: Path) -> Path:
    """root -> pkg-a -> pkg-b -> pkg-a, all hoisted."""
    root = write_package(tmp_path / "circular-chain", "circular-chain", {"pkg-a": "^1.0.0"}, index=False)
    write_package(root / "node_modules" / "pkg-a", "pkg-a", {"pkg-b": "^1.0.0"})
    write_package(root / "node_modules" / "pkg-b", "pkg-b", {"pkg-a": "^1.0.0"})
    return root


@pytest.fixture
def dev_dep_chain(tmp_path: Path) -> Path:
    """root declares pkg-a only in devDependencies."""
    root = write_package(tmp_path / "dev-dep-chain", "dev-dep-chain", dev_dependencies={"pkg-a": "^1.0.0"}, index=False)
    write_package(root / "node_modules" / "pkg-a", "pkg-a")
    return root


@pytest.fixture
def deep_chain(tmp_path: Path) -> Path:
    """root -> d1 -> ... -> d6 -> target, each installed inside its parent.

    d6 sits at fan-out depth 6, so target is only found with max_depth >= 6.
    """
    root = write_package(tmp_path / "deep-chain", "deep-chain", {"d1": "^1.0.0"}, index=False)
    parent = root
    for level in range(1, 7):
        dependency = "target" if level == 6 else f"d{level + 1}"
        parent = write_package(parent / "node_modules" / f"d{level}", f"d{level}", {dependency: "^1.0.0"})
    write_package(parent / "node_modules" / "target", "target")
    return root
