"""Record source backed by the GrooveCoaster mypage JSON endpoints."""

from typing import Any, Dict, List, Optional

import requests

from ..core.errors import NotFound, SourceUnavailable
from ..core.models import RecordId, RecordSummary, Snapshot, Tier, TierResult
from .record_source import RecordSource

DEFAULT_BASE_URL = "https://mypage.groovecoaster.jp"
MUSIC_LIST_PATH = "/sp/json/music_list.php"
MUSIC_DETAIL_PATH = "/sp/json/music_detail.php"

# result block key in the detail payload for each tier
RESULT_KEYS = {
    Tier.SIMPLE: "simple_result_data",
    Tier.NORMAL: "normal_result_data",
    Tier.HARD: "hard_result_data",
    Tier.EXTRA: "extra_result_data",
}


def _flag(value: Any) -> bool:
    """Mypage flags arrive as 0/1 integers, occasionally as strings or booleans."""
    if isinstance(value, str):
        return value.strip() not in ("", "0", "false")
    return bool(value)


def parse_result(data: Optional[Dict[str, Any]]) -> Optional[TierResult]:
    """Convert one ``*_result_data`` block, or None if the tier was never played."""
    if not data:
        return None
    return TierResult(
        play_count=int(data.get("play_count") or 0),
        score=int(data.get("score") or 0),
        max_chain=int(data.get("max_chain") or 0),
        perfect=_flag(data.get("perfect")),
        full_chain=_flag(data.get("full_chain")),
        no_miss=_flag(data.get("no_miss")),
    )


def parse_detail(detail: Dict[str, Any]) -> Snapshot:
    """Convert a ``music_detail`` payload into a snapshot."""
    has_extra = _flag(detail.get("ex_flag"))
    tiers = {}
    for tier, key in RESULT_KEYS.items():
        if tier is Tier.EXTRA and not has_extra:
            continue
        result = parse_result(detail.get(key))
        if result is not None:
            tiers[tier] = result
    return Snapshot(
        id=detail["music_id"],
        title=detail.get("music_title", ""),
        has_extra_tier=has_extra,
        tiers=tiers,
    )


class MypageRecordSource(RecordSource):
    """Reads play records over HTTP with an already authenticated session cookie."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, cookie: str = "",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if cookie:
            self.session.headers["Cookie"] = cookie

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        self.logger.debug(f"GET {url} {params or ''}")
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise SourceUnavailable(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise SourceUnavailable(f"Response from {url} is not JSON: {e}") from e

        if not isinstance(payload, dict):
            raise SourceUnavailable(f"Unexpected payload from {url}: {type(payload).__name__}")
        return payload

    def list_summaries(self) -> List[RecordSummary]:
        self.logger.info("Fetching music summary from mypage...")
        payload = self._get_json(MUSIC_LIST_PATH)

        music_list = payload.get("music_list")
        if not isinstance(music_list, list):
            raise SourceUnavailable("music_list missing from summary payload")

        try:
            summaries = [
                RecordSummary(
                    id=entry["music_id"],
                    title=entry.get("music_title", ""),
                    last_activity_time=entry["last_play_time"],
                )
                for entry in music_list
            ]
        except (KeyError, TypeError) as e:
            raise SourceUnavailable(f"Malformed music summary entry: {e}") from e

        self.logger.info(f"Fetched {len(summaries)} music summaries")
        return summaries

    def fetch_detail(self, record_id: RecordId) -> Snapshot:
        payload = self._get_json(MUSIC_DETAIL_PATH, params={"music_id": record_id})

        detail = payload.get("music_detail")
        if not detail:
            raise NotFound(record_id)

        try:
            return parse_detail(detail)
        except (KeyError, TypeError, ValueError) as e:
            raise SourceUnavailable(f"Malformed detail for record {record_id}: {e}") from e

    def close(self) -> None:
        self.session.close()
