"""Domain schema fragments composed after the root fragment."""

from .entries import entries_fragment
from .github import github_fragment

__all__ = ["entries_fragment", "github_fragment"]
