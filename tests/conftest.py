"""Shared fixtures for tree engine tests."""

import tempfile
from pathlib import Path

import pytest


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create files (and their parent directories) below root.

    Args:
        root: Directory to populate
        files: Mapping of forward-slash relative path to text content

    Returns:
        The root directory
    """
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root.joinpath(*relative.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_tree(temp_dir):
    """A small project tree with nested directories and an ignored folder."""
    return write_tree(
        temp_dir / "project",
        {
            "README.md": "# project\n",
            "src/main.py": "print('hello')\n",
            "src/lib/util.py": "def util():\n    return 1\n",
            "node_modules/x.txt": "vendored\n",
            "node_modules/pkg/index.js": "module.exports = 1;\n",
        },
    )
