"""Factory for creating the run components from configuration."""

from typing import Optional

from ..delivery.models import GitHubIssueConfig
from ..delivery.sinks import DeliverySink, GitHubIssueSink, LogSink, TextPostSink
from ..io.snapshot_store import JsonFileSnapshotStore, SnapshotStore
from ..source.mypage_source import MypageRecordSource
from ..source.record_source import RecordSource
from .coordinator import RunCoordinator
from .logging import get_logger

logger = get_logger(__name__)


class ComponentFactory:
    """Builds source, store, sink and coordinator from a Config."""

    @staticmethod
    def create_source(config) -> RecordSource:
        return MypageRecordSource(
            base_url=config.source_base_url,
            cookie=config.source_cookie,
            timeout=config.source_timeout_seconds,
        )

    @staticmethod
    def create_store(config) -> SnapshotStore:
        return JsonFileSnapshotStore(config.store_path, timezone=config.timezone)

    @staticmethod
    def create_sink(config) -> DeliverySink:
        """
        Create the delivery sink selected by ``config.delivery``.

        Raises:
            ValueError: If the delivery name is unknown
        """
        if config.delivery == "log":
            sink = LogSink()
        elif config.delivery == "post":
            sink = TextPostSink(
                url=config.post_url,
                max_chunk_length=config.post_chunk_length,
                hashtag=config.post_hashtag,
                timeout=config.source_timeout_seconds,
            )
        elif config.delivery == "github":
            sink = GitHubIssueSink(GitHubIssueConfig(
                repo_url=config.github_repo_url,
                token=config.github_token,
                issue_number=config.github_issue_number,
            ))
        else:
            raise ValueError(f"Unknown delivery: {config.delivery}")

        logger.debug(f"Created delivery sink: {sink.name}")
        return sink

    @staticmethod
    def create_coordinator(config, sink: Optional[DeliverySink] = None) -> RunCoordinator:
        return RunCoordinator(
            source=ComponentFactory.create_source(config),
            store=ComponentFactory.create_store(config),
            timezone=config.timezone,
            sink=sink,
        )
