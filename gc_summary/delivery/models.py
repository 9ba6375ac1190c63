"""Data models for digest delivery."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DeliveryStatus(Enum):
    """Status of a delivery attempt."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class GitHubIssueConfig:
    """Configuration for posting digests as GitHub issue comments."""

    repo_url: str
    token: str
    issue_number: int

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.repo_url or not self.token:
            raise ValueError("Both repo_url and token are required for GitHub delivery")
        if self.issue_number <= 0:
            raise ValueError("issue_number must be positive")

        if self.repo_url.startswith("https://"):
            object.__setattr__(self, 'repo_url', self.repo_url[len("https://"):])

    @property
    def repo_name(self) -> str:
        """Repository name in ``owner/repo`` form."""
        return self.repo_url.removeprefix("github.com/").rstrip("/")


@dataclass(frozen=True)
class DeliveryResult:
    """Result of delivering a digest."""

    status: DeliveryStatus
    message: str
    chunks: List[str] = field(default_factory=list)
    url: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        """True unless the delivery failed."""
        return self.status != DeliveryStatus.FAILED
