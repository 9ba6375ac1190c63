"""Data models for records, snapshots and digest items."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

RecordId = Union[int, str]


class Tier(Enum):
    """Difficulty tiers of a record, in display order."""
    SIMPLE = "simple"
    NORMAL = "normal"
    HARD = "hard"
    EXTRA = "extra"


@dataclass(frozen=True)
class TierDefinition:
    """One row of the tier table: persisted key, display label and presence rule."""
    tier: Tier
    label: str
    conditional: bool = False  # only present when the snapshot has the extra tier

    @property
    def key(self) -> str:
        return self.tier.value


TIERS: Tuple[TierDefinition, ...] = (
    TierDefinition(Tier.SIMPLE, "Simple"),
    TierDefinition(Tier.NORMAL, "Normal"),
    TierDefinition(Tier.HARD, "Hard"),
    TierDefinition(Tier.EXTRA, "Extra", conditional=True),
)

TIER_LABELS = {definition.label for definition in TIERS}


@dataclass(frozen=True)
class RecordSummary:
    """A playable record and the raw timestamp of its most recent play."""
    id: RecordId
    title: str
    last_activity_time: str


@dataclass
class TierResult:
    """Play statistics for one tier of a record."""

    play_count: int = 0
    score: int = 0
    max_chain: int = 0
    perfect: bool = False
    full_chain: bool = False
    no_miss: bool = False

    def to_dict(self) -> Dict:
        """Convert to the persisted field-named form."""
        return {
            'playCount': self.play_count,
            'score': self.score,
            'maxChain': self.max_chain,
            'perfect': self.perfect,
            'fullChain': self.full_chain,
            'noMiss': self.no_miss,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'TierResult':
        """Create from the persisted form; missing fields default to zero/unset."""
        return cls(
            play_count=int(data.get('playCount', 0)),
            score=int(data.get('score', 0)),
            max_chain=int(data.get('maxChain', 0)),
            perfect=bool(data.get('perfect', False)),
            full_chain=bool(data.get('fullChain', False)),
            no_miss=bool(data.get('noMiss', False)),
        )


@dataclass
class Snapshot:
    """Full captured state of a record's tiers at one point in time."""

    id: RecordId
    title: str
    has_extra_tier: bool = False
    tiers: Dict[Tier, TierResult] = field(default_factory=dict)

    def result(self, tier: Tier) -> TierResult:
        """Result for a tier, or an all-zero result if the tier is absent."""
        return self.tiers.get(tier) or TierResult()

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization.

        Tiers that are not present are omitted rather than written as zeros.
        """
        return {
            'id': self.id,
            'title': self.title,
            'hasExtraTier': self.has_extra_tier,
            'tiers': {tier.value: result.to_dict() for tier, result in self.tiers.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Snapshot':
        """Create from dictionary."""
        tiers = {}
        for key, value in (data.get('tiers') or {}).items():
            tiers[Tier(key)] = TierResult.from_dict(value)
        return cls(
            id=data['id'],
            title=data.get('title', ''),
            has_extra_tier=bool(data.get('hasExtraTier', False)),
            tiers=tiers,
        )


@dataclass(frozen=True)
class TierChange:
    """Noteworthy changes for one tier, in emission order."""
    tier_label: str
    notes: Tuple[str, ...]


@dataclass
class DigestItem:
    """Per-record digest entry: title plus its non-empty tier changes."""

    title: str
    changes: List[TierChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class RunResult:
    """Outcome of one coordinator pass."""

    success: bool
    digest: str = ""
    items: List[DigestItem] = field(default_factory=list)
    error: Optional[Exception] = None
    # DeliveryResult when the coordinator was given a sink
    delivery: Optional[Any] = None

    @property
    def has_changes(self) -> bool:
        return bool(self.items)
