# Tests for upsync.sync.retention
# Boundary generation and snapshot selection

from datetime import timedelta, timezone

from conftest import utc

from upsync.sync.retention import Candidate, RetentionPolicy, kept_keys, select_kept, time_boundaries


def _candidates(*pairs):
    return [Candidate(key=key, timestamp=ts, item=None) for key, ts in pairs]


def _keep(policy, now, pairs):
    return kept_keys(policy, now, pairs, key=lambda p: p[0], timestamp=lambda p: p[1])


class TestTimeBoundaries:
    """Tests for time_boundaries."""

    def test_counts_are_pooled(self):
        now = utc(2024, 6, 15, 12)
        boundaries = time_boundaries(RetentionPolicy(days=3, weeks=2, months=4), now)
        assert len(boundaries) == 9

    def test_days_start_at_midnight(self):
        now = utc(2024, 6, 15, 12, 30)
        boundaries = time_boundaries(RetentionPolicy(days=2, weeks=0, months=0), now)
        assert boundaries == [utc(2024, 6, 15), utc(2024, 6, 14)]

    def test_weeks_start_on_monday(self):
        # 2024-06-15 is a Saturday
        now = utc(2024, 6, 15, 12)
        boundaries = time_boundaries(RetentionPolicy(days=0, weeks=2, months=0), now)
        assert boundaries == [utc(2024, 6, 10), utc(2024, 6, 3)]
        assert all(b.weekday() == 0 for b in boundaries)

    def test_months_cross_year(self):
        now = utc(2024, 2, 20, 8)
        boundaries = time_boundaries(RetentionPolicy(days=0, weeks=0, months=4), now)
        assert boundaries == [utc(2024, 2, 1), utc(2024, 1, 1), utc(2023, 12, 1), utc(2023, 11, 1)]

    def test_keeps_timezone_of_now(self):
        tz = timezone(timedelta(hours=2))
        now = utc(2024, 6, 15, 12).astimezone(tz)
        (boundary,) = time_boundaries(RetentionPolicy(days=1, weeks=0, months=0), now)
        assert boundary.tzinfo == tz
        assert boundary.hour == 0

    def test_empty_policy(self):
        policy = RetentionPolicy(days=0, weeks=0, months=0)
        assert time_boundaries(policy, utc(2024, 6, 15)) == []


class TestSelectKept:
    """Tests for select_kept."""

    def test_picks_earliest_at_or_after_boundary(self):
        boundary = utc(2024, 6, 14)
        candidates = _candidates(
            ("old", utc(2024, 6, 13, 23)),
            ("exact", utc(2024, 6, 14)),
            ("later", utc(2024, 6, 14, 5)),
        )
        kept = select_kept([boundary], candidates)
        assert kept[boundary].key == "exact"

    def test_boundary_without_candidate_is_absent(self):
        boundary = utc(2024, 6, 15)
        kept = select_kept([boundary], _candidates(("old", utc(2024, 6, 1))))
        assert kept == {}

    def test_ties_resolved_by_ascending_key(self):
        boundary = utc(2024, 6, 14)
        ts = utc(2024, 6, 14, 3)
        kept = select_kept([boundary], _candidates(("b.gz", ts), ("a.gz", ts), ("c.gz", ts)))
        assert kept[boundary].key == "a.gz"

    def test_same_candidate_for_several_boundaries(self):
        boundaries = [utc(2024, 6, 15), utc(2024, 6, 14), utc(2024, 6, 13)]
        kept = select_kept(boundaries, _candidates(("only", utc(2024, 6, 15, 1))))
        assert {c.key for c in kept.values()} == {"only"}
        assert len(kept) == 3


class TestKeptKeys:
    """Tests for kept_keys."""

    def test_two_days_keeps_two_newest(self):
        now = utc(2024, 6, 15, 12)
        pairs = [
            ("three-days", now - timedelta(days=3)),
            ("one-day", now - timedelta(days=1)),
            ("now", now),
        ]
        kept = _keep(RetentionPolicy(days=2, weeks=0, months=0), now, pairs)
        assert kept == {"one-day", "now"}

    def test_empty_policy_keeps_nothing(self):
        now = utc(2024, 6, 15, 12)
        assert _keep(RetentionPolicy(days=0, weeks=0, months=0), now, [("a", now)]) == set()

    def test_daily_snapshots_with_weeks_and_months(self):
        now = utc(2024, 6, 15, 12)
        pairs = [(f"dump-{i:03d}", now - timedelta(days=i)) for i in range(120)]
        kept = _keep(RetentionPolicy(days=3, weeks=2, months=2), now, pairs)

        # Today, yesterday, the day before
        assert {"dump-000", "dump-001", "dump-002"} <= kept
        # Mondays 2024-06-10 and 2024-06-03 at 12:00
        assert {"dump-005", "dump-012"} <= kept
        # 2024-06-01 and 2024-05-01 at 12:00
        assert {"dump-014", "dump-045"} <= kept
        assert len(kept) == 7

    def test_no_items(self):
        assert _keep(RetentionPolicy(), utc(2024, 6, 15), []) == set()
