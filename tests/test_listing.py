"""Tests for index ordering and search."""

from pakman.core.listing import search, sorted_ids, sorted_specs
from pakman.models.pak import Spec


def make_index(*ids):
    return {i: Spec(id=i) for i in ids}


class TestOrdering:
    def test_case_insensitive_with_tie_break(self):
        index = make_index("Widget", "apple", "Apple")
        assert sorted_ids(index) == ["Apple", "apple", "Widget"]

    def test_specs_follow_id_order(self):
        index = make_index("zeta", "Alpha", "beta")
        assert [s.id for s in sorted_specs(index)] == ["Alpha", "beta", "zeta"]

    def test_empty(self):
        assert sorted_ids({}) == []


class TestSearch:
    def test_substring_ignores_case(self):
        index = make_index("Widget", "apple", "Apple")
        assert [s.id for s in search(index, "wid")] == ["Widget"]

    def test_results_sorted(self):
        index = make_index("libfoo", "FooBar", "bar")
        assert [s.id for s in search(index, "FOO")] == ["FooBar", "libfoo"]

    def test_no_match(self):
        assert search(make_index("widget"), "gadget") == []

    def test_empty_query_matches_all(self):
        assert len(search(make_index("a", "b"), "")) == 2
