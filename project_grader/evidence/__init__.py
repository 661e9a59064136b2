"""Evidence collection package."""

from .github import GitHubEvidenceCollector, parse_repo_url, select_files
from .models import RepositoryEntry, RepositoryPolicy, RepositorySnapshot

__all__ = [
    "GitHubEvidenceCollector",
    "RepositoryEntry",
    "RepositoryPolicy",
    "RepositorySnapshot",
    "parse_repo_url",
    "select_files",
]
