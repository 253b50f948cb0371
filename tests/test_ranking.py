"""
Tests for the stable sort and rank assignment.
"""

from stormrank.ranking import assign_ranks, stable_sort


class TestStableSort:

    def test_descending_keeps_tie_order(self):
        items = [("a", 1), ("b", 3), ("c", 1), ("d", 3), ("e", 2)]
        out = stable_sort(items, key=lambda x: x[1])
        assert [k for k, _ in out] == ["b", "d", "e", "a", "c"]

    def test_ascending_keeps_tie_order(self):
        items = [("a", 1), ("b", 3), ("c", 1), ("d", 3)]
        out = stable_sort(items, key=lambda x: x[1], descending=False)
        assert [k for k, _ in out] == ["a", "c", "b", "d"]

    def test_empty_and_single(self):
        assert stable_sort([], key=lambda x: x) == []
        assert stable_sort([5], key=lambda x: x) == [5]


class TestAssignRanks:

    def test_largest_is_one_and_ties_by_position(self):
        ranks = assign_ranks(["x", "y", "z", "w"], [10, 30, 10, 20])
        assert ranks == {"y": 1, "w": 2, "x": 3, "z": 4}

    def test_permutation(self):
        labels = [f"t{i}" for i in range(25)]
        values = [i % 4 for i in range(25)]
        ranks = assign_ranks(labels, values)
        assert sorted(ranks.values()) == list(range(1, 26))
