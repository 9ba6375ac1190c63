"""Tests for the snapshot diff."""

import pytest

from gc_summary.core.diff import achievement_note, diff_snapshots, tier_notes
from gc_summary.core.models import Snapshot, Tier, TierChange, TierResult


def snapshot(has_extra=False, **tiers):
    return Snapshot(
        id=1,
        title="Got a pain cover?",
        has_extra_tier=has_extra,
        tiers={Tier(name): TierResult(**values) for name, values in tiers.items()},
    )


def notes_by_tier(changes):
    return {change.tier_label: list(change.notes) for change in changes}


class TestTierNotes:
    """Test the notes emitted for a single tier."""

    def test_hard_tier_reference_scenario(self):
        old = TierResult(play_count=99, score=500, max_chain=20, no_miss=False)
        new = TierResult(play_count=100, score=600, max_chain=25, no_miss=True)

        assert tier_notes(old, new) == ["NoMiss", "⛓ +5", "100 Played!", "📈 +5"]

    def test_score_note_reports_chain_delta(self):
        old = TierResult(play_count=3, score=1000, max_chain=40)
        new = TierResult(play_count=4, score=250000, max_chain=47)

        assert tier_notes(old, new) == ["⛓ +7", "📈 +7"]

    def test_score_increase_without_chain_increase_reports_zero(self):
        old = TierResult(play_count=3, score=1000, max_chain=40)
        new = TierResult(play_count=4, score=2000, max_chain=40)

        assert tier_notes(old, new) == ["📈 +0"]

    def test_regressions_are_not_notable(self):
        old = TierResult(play_count=10, score=5000, max_chain=80)
        new = TierResult(play_count=9, score=4000, max_chain=70)

        assert tier_notes(old, new) == []

    @pytest.mark.parametrize("count,expected", [(99, False), (100, True), (101, False)])
    def test_milestone_fires_only_at_exactly_100(self, count, expected):
        result = TierResult(play_count=count)

        assert ("100 Played!" in tier_notes(result, result)) is expected


class TestAchievementNote:
    """Test achievement priority."""

    def test_perfect_wins_over_full_chain(self):
        assert achievement_note(TierResult(perfect=True, full_chain=True, no_miss=True)) == "Perfect"

    def test_full_chain_wins_over_no_miss(self):
        assert achievement_note(TierResult(full_chain=True, no_miss=True)) == "FullChain"

    def test_no_miss_alone(self):
        assert achievement_note(TierResult(no_miss=True)) == "NoMiss"

    def test_no_flags(self):
        assert achievement_note(TierResult()) is None


class TestDiffSnapshots:
    """Test the per-record diff."""

    def test_identical_snapshots_without_flags_yield_nothing(self):
        old = snapshot(simple={"play_count": 5, "score": 100, "max_chain": 10},
                       hard={"play_count": 2, "score": 50, "max_chain": 3})

        assert diff_snapshots(old, old) == []

    def test_identical_snapshots_refire_set_flags(self):
        old = snapshot(normal={"play_count": 5, "score": 100, "max_chain": 10, "full_chain": True})

        assert diff_snapshots(old, old) == [TierChange(tier_label="Normal", notes=("FullChain",))]

    def test_identical_snapshots_report_milestone_at_100(self):
        old = snapshot(simple={"play_count": 100})

        assert notes_by_tier(diff_snapshots(old, old)) == {"Simple": ["100 Played!"]}

    def test_both_perfect_and_full_chain_yield_only_perfect(self):
        new = snapshot(hard={"play_count": 1, "perfect": True, "full_chain": True})

        assert notes_by_tier(diff_snapshots(new, new)) == {"Hard": ["Perfect"]}

    def test_unplayed_tier_is_skipped(self):
        new = snapshot(simple={"play_count": 0, "perfect": True})

        assert diff_snapshots(new, new) == []

    def test_extra_tier_skipped_without_flag(self):
        old = snapshot(extra={"play_count": 1, "max_chain": 1})
        new = snapshot(extra={"play_count": 2, "max_chain": 9, "perfect": True})

        assert diff_snapshots(old, new) == []

    def test_extra_tier_included_with_flag(self):
        old = snapshot(has_extra=True, extra={"play_count": 1, "max_chain": 1})
        new = snapshot(has_extra=True, extra={"play_count": 2, "max_chain": 9})

        assert diff_snapshots(old, new) == [TierChange(tier_label="Extra", notes=("⛓ +8",))]

    def test_tier_missing_from_old_compares_against_zero(self):
        old = snapshot(simple={"play_count": 3, "score": 10, "max_chain": 2})
        new = snapshot(simple={"play_count": 3, "score": 10, "max_chain": 2},
                       hard={"play_count": 1, "score": 300, "max_chain": 30})

        assert notes_by_tier(diff_snapshots(old, new)) == {"Hard": ["⛓ +30", "📈 +30"]}

    def test_changes_are_in_tier_order(self):
        old = snapshot(has_extra=True,
                       simple={"play_count": 1}, normal={"play_count": 1},
                       hard={"play_count": 1}, extra={"play_count": 1})
        new = snapshot(has_extra=True,
                       simple={"play_count": 2, "max_chain": 1}, normal={"play_count": 2, "max_chain": 1},
                       hard={"play_count": 2, "max_chain": 1}, extra={"play_count": 2, "max_chain": 1})

        assert [c.tier_label for c in diff_snapshots(old, new)] == ["Simple", "Normal", "Hard", "Extra"]

    def test_tier_insertion_order_does_not_matter(self):
        values = {
            "hard": {"play_count": 4, "score": 900, "max_chain": 50, "no_miss": True},
            "simple": {"play_count": 100, "score": 100, "max_chain": 10},
            "normal": {"play_count": 7, "perfect": True},
        }
        old = snapshot(simple={"play_count": 99}, hard={"play_count": 3, "max_chain": 45})
        new_forward = snapshot(**values)
        new_reversed = snapshot(**dict(reversed(list(values.items()))))

        assert notes_by_tier(diff_snapshots(old, new_forward)) == notes_by_tier(diff_snapshots(old, new_reversed))

    def test_diff_does_not_mutate_inputs(self):
        old = snapshot(simple={"play_count": 1, "max_chain": 1})
        new = snapshot(simple={"play_count": 2, "max_chain": 5})
        old_before, new_before = old.to_dict(), new.to_dict()

        diff_snapshots(old, new)

        assert old.to_dict() == old_before
        assert new.to_dict() == new_before
