"""Infrastructure adapters for external services."""

from .github import GitHubClient, GitHubRepositories, GitHubUsers

__all__ = ["GitHubClient", "GitHubRepositories", "GitHubUsers"]
