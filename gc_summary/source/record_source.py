"""Abstract record source interface."""

from abc import ABC, abstractmethod
from typing import List

from ..core.logging import get_logger
from ..core.models import RecordId, RecordSummary, Snapshot


class RecordSource(ABC):
    """Abstract base class for the remote service that supplies play records."""

    def __init__(self):
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def list_summaries(self) -> List[RecordSummary]:
        """
        List every played record, most recently played first.

        Raises:
            SourceUnavailable: On transport or decoding failure
        """
        pass

    @abstractmethod
    def fetch_detail(self, record_id: RecordId) -> Snapshot:
        """
        Fetch the full per-tier state of one record.

        Raises:
            SourceUnavailable: On transport or decoding failure
            NotFound: If the source has no detail for the record
        """
        pass

    def close(self) -> None:
        """Release any held connections."""
