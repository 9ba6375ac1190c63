"""Delivery sinks that hand a finished digest to a notification channel."""

from abc import ABC, abstractmethod
from typing import List, Optional

import requests
from github import Auth, Github, GithubException

from ..core.digest import format_batch
from ..core.logging import get_logger
from ..core.models import RunResult
from .models import DeliveryResult, DeliveryStatus, GitHubIssueConfig

DEFAULT_POST_CHUNK_LENGTH = 140


class DeliverySink(ABC):
    """Abstract base class for digest delivery."""

    name = "sink"

    def __init__(self):
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    def deliver(self, result: RunResult) -> DeliveryResult:
        """Deliver the digest of a successful run.

        Empty digests are skipped; they are never an error.
        """
        if not result.digest:
            self.logger.info(f"Nothing to deliver via {self.name}")
            return DeliveryResult(status=DeliveryStatus.SKIPPED, message="Empty digest")
        return self._deliver(result)

    @abstractmethod
    def _deliver(self, result: RunResult) -> DeliveryResult:
        pass


class LogSink(DeliverySink):
    """Writes the digest to the process log."""

    name = "log"

    def _deliver(self, result: RunResult) -> DeliveryResult:
        self.logger.info(f"\n{result.digest}")
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message="Digest written to log",
            chunks=[result.digest],
        )


class TextPostSink(DeliverySink):
    """Posts the digest as one or more length-bounded text posts.

    Each chunk is sent as ``{"text": chunk}`` to ``url``. Posting stops at
    the first failed chunk and is not retried.
    """

    name = "post"

    def __init__(self, url: str, max_chunk_length: int = DEFAULT_POST_CHUNK_LENGTH,
                 hashtag: str = "", timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.url = url
        self.max_chunk_length = max_chunk_length
        self.hashtag = hashtag
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_chunks(self, result: RunResult) -> List[str]:
        chunks = format_batch(result.items, self.max_chunk_length)
        if chunks and self.hashtag:
            tagged = f"{chunks[-1]}\n{self.hashtag}"
            if len(tagged) <= self.max_chunk_length:
                chunks[-1] = tagged
        return chunks

    def _deliver(self, result: RunResult) -> DeliveryResult:
        chunks = self.build_chunks(result)
        posted = []
        for index, chunk in enumerate(chunks, start=1):
            if len(chunk) > self.max_chunk_length:
                self.logger.warning(f"Chunk {index} is {len(chunk)} chars, over the {self.max_chunk_length} limit")
            try:
                response = self.session.post(self.url, json={"text": chunk}, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                self.logger.error(f"Failed to post chunk {index}/{len(chunks)}: {e}")
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Posted {len(posted)} of {len(chunks)} chunks: {e}",
                    chunks=posted,
                    error=e,
                )
            posted.append(chunk)
            self.logger.debug(f"Posted chunk {index}/{len(chunks)}")

        self.logger.info(f"Posted digest in {len(posted)} chunks")
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"Posted {len(posted)} chunks",
            chunks=posted,
            url=self.url,
        )


class GitHubIssueSink(DeliverySink):
    """Posts the digest as a comment on a GitHub issue."""

    name = "github"

    def __init__(self, config: GitHubIssueConfig):
        super().__init__()
        self.config = config

    def _deliver(self, result: RunResult) -> DeliveryResult:
        try:
            github_client = Github(auth=Auth.Token(self.config.token))
            repo = github_client.get_repo(self.config.repo_name)
            issue = repo.get_issue(number=self.config.issue_number)
            comment = issue.create_comment(f"```\n{result.digest}\n```")
        except (GithubException, requests.RequestException) as e:
            self.logger.error(f"Failed to comment on {self.config.repo_name}#{self.config.issue_number}: {e}")
            return DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"GitHub comment failed: {e}",
                error=e,
            )

        self.logger.info(f"Digest posted: {comment.html_url}")
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"Commented on {self.config.repo_name}#{self.config.issue_number}",
            chunks=[result.digest],
            url=comment.html_url,
        )
