"""Testing utilities for TreeExplorerLib consumers."""

from .fixtures import InvariantChecker

__all__ = ['InvariantChecker']
