"""Repository evidence collection from the GitHub contents API.

The collector never raises: every failure becomes diagnostic text that is
handed to the grader as evidence.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

import httpx

from .models import (
    INVALID_URL_FORMAT,
    NO_VALID_URL,
    FetchedFile,
    RepositoryEntry,
    RepositoryPolicy,
    RepositorySnapshot,
)

LOG = logging.getLogger(__name__)

REPO_URL_PATTERN = re.compile(r"github\.com[/:]([^/\s?#]+)/([^/\s?#]+)")

LISTING_FAILED = (
    "Could not fetch repository contents ({detail}). "
    "The repository may be private or deleted."
)


def parse_repo_url(repo_url: str) -> Optional[Tuple[str, str]]:
    """Extract (owner, repo) from a GitHub URL, or None if it does not match."""
    match = REPO_URL_PATTERN.search(repo_url)
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return owner, repo


def select_files(entries: List[RepositoryEntry], policy: RepositoryPolicy) -> List[RepositoryEntry]:
    """Pick the README plus up to ``max_source_files`` whitelisted source files."""
    files = [e for e in entries if e.type == "file"]
    selected: List[RepositoryEntry] = []

    readme = next((e for e in files if "readme" in e.name.lower()), None)
    if readme is not None:
        selected.append(readme)

    sources = [
        e for e in files
        if "readme" not in e.name.lower() and e.extension in policy.source_extensions
    ]
    selected.extend(sources[: policy.max_source_files])
    return selected


class GitHubEvidenceCollector:
    """Builds the evidence bundle for a student's repository."""

    def __init__(self, policy: Optional[RepositoryPolicy] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the collector.

        Args:
            policy: Limits and endpoints (defaults to RepositoryPolicy())
            client: Shared HTTP client; a short-lived one is created per call if omitted
        """
        self.policy = policy or RepositoryPolicy()
        self.client = client

    async def collect(self, repo_url: str) -> str:
        """
        Produce the evidence bundle for ``repo_url``.

        Returns:
            Delimited file excerpts and the root listing, or a diagnostic message
        """
        if not repo_url or self.policy.host_marker not in repo_url:
            return NO_VALID_URL

        parsed = parse_repo_url(repo_url)
        if parsed is None:
            LOG.warning("Could not parse GitHub URL %r", repo_url)
            return INVALID_URL_FORMAT
        owner, repo = parsed

        if self.client is not None:
            return await self._collect_with(self.client, owner, repo)

        async with httpx.AsyncClient(
            timeout=self.policy.timeout_seconds,
            headers={"Accept": "application/vnd.github+json"},
            follow_redirects=True,
        ) as client:
            return await self._collect_with(client, owner, repo)

    async def _collect_with(self, client: httpx.AsyncClient, owner: str, repo: str) -> str:
        listing_url = f"{self.policy.api_base.rstrip('/')}/repos/{owner}/{repo}/contents"
        try:
            response = await client.get(listing_url)
        except httpx.HTTPError as e:
            LOG.warning("Repository listing failed for %s/%s: %s", owner, repo, e)
            return LISTING_FAILED.format(detail=f"network error: {e}")
        except httpx.InvalidURL as e:
            LOG.warning("Repository listing URL for %s/%s is invalid: %s", owner, repo, e)
            return LISTING_FAILED.format(detail=f"invalid URL: {e}")

        if not response.is_success:
            LOG.warning("Repository listing for %s/%s returned %d", owner, repo, response.status_code)
            return LISTING_FAILED.format(detail=f"Status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            LOG.warning("Repository listing for %s/%s was not JSON: %s", owner, repo, e)
            return LISTING_FAILED.format(detail="unreadable response")
        if not isinstance(payload, list):
            return LISTING_FAILED.format(detail="unexpected response shape")

        entries = [
            RepositoryEntry(
                name=str(item.get("name", "")),
                type=str(item.get("type", "")),
                download_url=item.get("download_url"),
            )
            for item in payload
            if isinstance(item, dict) and item.get("name")
        ]

        snapshot = RepositorySnapshot(owner=owner, repo=repo, entries=entries)
        for entry in select_files(entries, self.policy):
            snapshot.files.append(await self._fetch_file(client, entry))

        LOG.debug("Collected %d files from %s/%s", len(snapshot.files), owner, repo)
        return snapshot.render()

    async def _fetch_file(self, client: httpx.AsyncClient, entry: RepositoryEntry) -> FetchedFile:
        if not entry.download_url:
            return FetchedFile(name=entry.name)
        try:
            response = await client.get(entry.download_url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            LOG.warning("Error downloading %s: %s", entry.name, e)
            return FetchedFile(name=entry.name)
        return FetchedFile(name=entry.name, content=response.text[: self.policy.max_file_chars])
