import itertools
from datetime import date

from salestrack.engine import aggregate, aggregate_by_user, average_per_entry, combine_totals
from salestrack.engine.types import DailyRecord, DateRange
from salestrack.models.shared.enums import MetricKey

WEEK = DateRange(start=date(2025, 3, 3), end=date(2025, 3, 9))


def record(day: int, user_id: int = 1, **counts) -> DailyRecord:
    return DailyRecord.from_counts(user_id, date(2025, 3, day), counts)


class TestAggregate:
    """Summation over an inclusive date range"""

    def test_empty_input_gives_all_zero_totals(self):
        totals = aggregate([], WEEK)
        assert set(totals) == set(MetricKey)
        assert all(value == 0 for value in totals.values())

    def test_none_input_gives_all_zero_totals(self):
        assert aggregate(None, WEEK) == {metric: 0 for metric in MetricKey}

    def test_range_bounds_are_inclusive(self):
        records = [record(2, fa=100), record(3, fa=1), record(9, fa=2), record(10, fa=100)]
        assert aggregate(records, WEEK)[MetricKey.FA] == 3

    def test_order_of_records_does_not_matter(self):
        records = [record(3, eh=0.1), record(4, eh=0.2), record(5, eh=0.3), record(6, eh=1e16), record(7, eh=-3)]
        expected = aggregate(records, WEEK)
        for permutation in itertools.permutations(records):
            assert aggregate(list(permutation), WEEK) == expected

    def test_integer_counts_stay_integers(self):
        totals = aggregate([record(3, fa=2), record(4, fa=3)], WEEK)
        assert totals[MetricKey.FA] == 5
        assert isinstance(totals[MetricKey.FA], int)

    def test_invalid_counts_are_zero(self):
        totals = aggregate([record(3, fa=-4, recommendations="x", tiv_invitations=None)], WEEK)
        assert totals[MetricKey.FA] == 0
        assert totals[MetricKey.RECOMMENDATIONS] == 0
        assert totals[MetricKey.TIV_INVITATIONS] == 0


class TestRollups:
    def test_aggregate_by_user(self):
        records = [record(3, user_id=1, fa=2), record(4, user_id=2, fa=5), record(5, user_id=1, fa=1)]
        by_user = aggregate_by_user(records, WEEK)
        assert by_user[1][MetricKey.FA] == 3
        assert by_user[2][MetricKey.FA] == 5

    def test_combine_totals_is_pointwise_sum(self):
        first = aggregate([record(3, fa=2, eh=10.5)], WEEK)
        second = aggregate([record(4, fa=3, eh=4.5)], WEEK)
        combined = combine_totals([first, second])
        assert combined[MetricKey.FA] == 5
        assert combined[MetricKey.EH] == 15.0

    def test_combine_nothing_gives_zeros(self):
        assert combine_totals([]) == {metric: 0 for metric in MetricKey}

    def test_average_per_entry(self):
        records = [record(3, fa=2), record(4, fa=4), record(20, fa=100)]
        averages = average_per_entry(records, WEEK)
        assert averages[MetricKey.FA] == 3.0
        assert average_per_entry([], WEEK)[MetricKey.FA] == 0.0
