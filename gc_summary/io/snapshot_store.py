"""Snapshot store: cached per-record snapshots plus the global watermark."""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from ..core.errors import StoreUnavailable
from ..core.logging import get_logger
from ..core.models import RecordId, Snapshot
from ..core.watermark import DEFAULT_TIMEZONE, format_timestamp, load_timezone, parse_timestamp


class SnapshotStore(ABC):
    """Key/value contract the run coordinator consumes.

    A store is opened before a run and closed after it; use it as a context
    manager. Watermarks are persisted as ``YYYY-MM-DD HH:MM:SS`` strings in
    the store's timezone.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = load_timezone(timezone)
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    def open(self) -> None:
        """Acquire the underlying resource."""

    def close(self) -> None:
        """Release the underlying resource."""

    def __enter__(self) -> 'SnapshotStore':
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def get(self, record_id: RecordId) -> Optional[Snapshot]:
        """Cached snapshot for a record, or None if never seen."""

    @abstractmethod
    def set(self, record_id: RecordId, snapshot: Snapshot) -> None:
        """Replace the cached snapshot for a record."""

    @abstractmethod
    def _read_watermark(self) -> Optional[str]:
        """Raw persisted watermark text, or None if absent."""

    @abstractmethod
    def _write_watermark(self, value: str) -> None:
        """Persist raw watermark text."""

    def get_watermark(self) -> Optional[datetime]:
        """Last processed timestamp, or None on the very first run.

        Raises:
            MalformedTimestamp: If the persisted value cannot be parsed
            StoreUnavailable: If the store cannot be read
        """
        value = self._read_watermark()
        if value is None:
            return None
        return parse_timestamp(value, self.timezone)

    def set_watermark(self, moment: datetime) -> None:
        """Persist a new watermark."""
        value = format_timestamp(moment, self.timezone)
        self._write_watermark(value)
        self.logger.info(f"Watermark set to {value}")


class InMemorySnapshotStore(SnapshotStore):
    """Dict-backed store for tests and dry runs.

    Snapshots are kept in their serialized form so callers never share
    mutable state with the store.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE, watermark: Optional[str] = None):
        super().__init__(timezone)
        self.records: Dict[str, Dict] = {}
        self.watermark: Optional[str] = watermark

    def get(self, record_id: RecordId) -> Optional[Snapshot]:
        data = self.records.get(str(record_id))
        return Snapshot.from_dict(data) if data is not None else None

    def set(self, record_id: RecordId, snapshot: Snapshot) -> None:
        self.records[str(record_id)] = snapshot.to_dict()

    def _read_watermark(self) -> Optional[str]:
        return self.watermark

    def _write_watermark(self, value: str) -> None:
        self.watermark = value


class JsonFileSnapshotStore(SnapshotStore):
    """Store backed by a single JSON document on disk.

    Layout::

        {"watermark": "2017-01-01 10:21:30",
         "last_updated": "<iso timestamp>",
         "records": {"<id>": {<snapshot>}}}

    Every write is flushed to disk immediately through a temporary file and
    an atomic replace.
    """

    def __init__(self, path: str, timezone: str = DEFAULT_TIMEZONE):
        super().__init__(timezone)
        self.path = Path(path)
        self._document: Optional[Dict] = None

    def open(self) -> None:
        self._document = self._load()
        self.logger.info(f"Opened snapshot store {self.path} ({len(self._document['records'])} cached records)")

    def close(self) -> None:
        if self._document is not None:
            self.logger.info(f"Closed snapshot store {self.path}")
        self._document = None

    @property
    def document(self) -> Dict:
        if self._document is None:
            self._document = self._load()
        return self._document

    def _load(self) -> Dict:
        """Read the store document, or an empty one if the file does not exist yet.

        Raises:
            StoreUnavailable: If the file exists but cannot be read or decoded
        """
        if not self.path.exists():
            self.logger.info(f"Snapshot store file does not exist yet: {self.path}")
            return {'watermark': None, 'records': {}}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailable(f"Cannot read snapshot store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreUnavailable(f"Snapshot store {self.path} is not a JSON object")
        data.setdefault('watermark', None)
        data.setdefault('records', {})
        if not isinstance(data['records'], dict):
            raise StoreUnavailable(f"Snapshot store {self.path} has malformed records: expected an object")
        return data

    def _save(self) -> None:
        """Write the document back to disk.

        Raises:
            StoreUnavailable: If the file cannot be written
        """
        document = self.document
        document['last_updated'] = datetime.now().isoformat()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StoreUnavailable(f"Cannot write snapshot store {self.path}: {e}") from e

    def get(self, record_id: RecordId) -> Optional[Snapshot]:
        data = self.document['records'].get(str(record_id))
        if data is None:
            return None
        try:
            return Snapshot.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreUnavailable(f"Cached snapshot for record {record_id} is corrupt: {e}") from e

    def set(self, record_id: RecordId, snapshot: Snapshot) -> None:
        self.document['records'][str(record_id)] = snapshot.to_dict()
        self._save()
        self.logger.debug(f"Cached snapshot for record {record_id}")

    def _read_watermark(self) -> Optional[str]:
        return self.document.get('watermark')

    def _write_watermark(self, value: str) -> None:
        self.document['watermark'] = value
        self._save()
