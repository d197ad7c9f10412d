"""Shared pytest configuration for TreeExplorerLib tests."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from treeexplorerlib import create_tree


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: randomized stress tests over many operations")


@pytest.fixture
def bst_sample():
    """BST holding 50, 30, 70, 20, 40, 60, 80."""
    tree = create_tree('bst')
    for value in [50, 30, 70, 20, 40, 60, 80]:
        tree.insert(value)
    return tree
