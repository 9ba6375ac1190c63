"""Per-record diff of an old snapshot against a new one."""

from typing import List, Optional

from .models import TIERS, Snapshot, TierChange, TierResult

PERFECT_NOTE = "Perfect"
FULL_CHAIN_NOTE = "FullChain"
NO_MISS_NOTE = "NoMiss"
MILESTONE_NOTE = "100 Played!"
MILESTONE_PLAY_COUNT = 100


def chain_note(delta: int) -> str:
    return f"⛓ +{delta}"


def score_note(delta: int) -> str:
    return f"📈 +{delta}"


def achievement_note(result: TierResult) -> Optional[str]:
    """Highest-priority achievement flag set on a result, if any."""
    if result.perfect:
        return PERFECT_NOTE
    if result.full_chain:
        return FULL_CHAIN_NOTE
    if result.no_miss:
        return NO_MISS_NOTE
    return None


def tier_notes(old: TierResult, new: TierResult) -> List[str]:
    """Noteworthy facts for one tier, in emission order.

    Achievement flags are read from ``new`` only, so a flag that stays set
    is reported again on every run. The score note carries the max chain
    delta, not the score delta.
    """
    notes = []

    achievement = achievement_note(new)
    if achievement:
        notes.append(achievement)

    if new.max_chain > old.max_chain:
        notes.append(chain_note(new.max_chain - old.max_chain))

    if new.play_count == MILESTONE_PLAY_COUNT:
        notes.append(MILESTONE_NOTE)

    if new.score > old.score:
        # TODO: report new.score - old.score once the chain-delta magnitude is confirmed unintended
        notes.append(score_note(new.max_chain - old.max_chain))

    return notes


def diff_snapshots(old: Snapshot, new: Snapshot) -> List[TierChange]:
    """Compute the noteworthy changes between two snapshots of one record.

    Args:
        old: Previously cached snapshot (pass ``new`` itself when none exists)
        new: Freshly fetched snapshot

    Returns:
        One TierChange per tier with at least one note, in tier order
    """
    changes = []
    for definition in TIERS:
        if definition.conditional and not new.has_extra_tier:
            continue

        new_result = new.result(definition.tier)
        if new_result.play_count == 0:
            continue

        notes = tier_notes(old.result(definition.tier), new_result)
        if notes:
            changes.append(TierChange(tier_label=definition.label, notes=tuple(notes)))
    return changes
