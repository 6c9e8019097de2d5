"""Core types for repository batches."""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

# Local summary values
STATUS_CLEAN = "Clean"
STATUS_EMPTY = "Empty repo."
STATUS_MISSING = "Missing"
STATUS_ERROR = "Error"

# Sync state values
STATE_SYNCED = "Synced"
STATE_UNKNOWN = "Unknown"
STATE_STALE = "Stale"
STATE_NOT_APPLICABLE = "-"

UNKNOWN_BRANCH = "Unknown"


@dataclass(frozen=True)
class Course:
    """A course in the catalog."""
    id: str
    name: str


@dataclass(frozen=True)
class Assignment:
    """An assignment within a course."""
    id: str
    name: str


@dataclass(frozen=True)
class CatalogRepo:
    """A repository listed for an assignment."""
    name: str
    url: str


@dataclass(frozen=True)
class RepoInfo:
    """One unit of work: where a repository lives remotely and locally."""
    name: str
    url: str
    path: str
    use_http: bool = False

    @classmethod
    def from_catalog(cls, repo: CatalogRepo, base_dir: str, use_http: bool = False) -> 'RepoInfo':
        """Build a descriptor that clones ``repo`` into ``base_dir/<name>``."""
        return cls(
            name=repo.name,
            url=repo.url,
            path=os.path.join(base_dir, repo.name),
            use_http=use_http
        )


@dataclass(frozen=True)
class SyncOutcome:
    """Result of bringing one repository up to date."""
    name: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """Check if the repository was synced."""
        return self.error is None

    @property
    def failed(self) -> bool:
        """Check if syncing failed."""
        return self.error is not None


@dataclass(frozen=True)
class RepoStatus:
    """Snapshot of one repository's local and remote state."""
    name: str
    branch: str = STATE_NOT_APPLICABLE
    local_summary: str = STATUS_MISSING
    sync_state: str = STATE_NOT_APPLICABLE
    last_commit_time: Optional[datetime] = None
    error: Optional[Exception] = None
    fetch_error: Optional[Exception] = None

    @property
    def missing(self) -> bool:
        """Check if the local copy does not exist."""
        return self.local_summary == STATUS_MISSING

    @property
    def stale(self) -> bool:
        """Check if the sync state was computed without a fresh fetch."""
        return self.fetch_error is not None

    @property
    def ok(self) -> bool:
        """Check if the status was collected without errors."""
        return self.error is None
