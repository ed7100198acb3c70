"""Tests for the taxonomy catalogs."""

from gymticks.ordered import OrderedMap
from gymticks.taxonomy import (
    TaxonomyEntry,
    catalog_to_dict,
    default_choice,
    default_colors,
    default_grades,
    default_sections,
    group,
    grouped,
    lookup,
    rank,
)


class TestDefaults:
    def test_colors_ranked_in_catalog_order(self):
        colors = default_colors()
        assert list(colors)[:3] == ["red", "orange", "yellow"]
        assert [e.sort for e in colors.values()] == list(range(1, 11))

    def test_section_ab2_is_labelled_map(self):
        assert default_sections()["AB2"] == TaxonomyEntry(group="A", label="MAP", sort=2)
        assert default_sections()["VRT"].sort == 15

    def test_grades_split_ropes_and_boulders(self):
        grades = default_grades()
        assert grades["12+"] == TaxonomyEntry(group="A", label="12+", sort=14)
        assert grades["V0-"] == TaxonomyEntry(group="B", label="V0-", sort=15)
        assert len(grades) == 24


class TestLookup:
    def test_present_key(self):
        sections = default_sections()
        assert lookup(sections, "SLB").group == "B"
        assert rank(sections, "SLB") == 9
        assert group(sections, "SLB") == "B"

    def test_missing_key_degrades(self):
        sections = default_sections()
        assert lookup(sections, "gone") is None
        assert rank(sections, "gone") == 0
        assert group(sections, "gone") is None

    def test_default_choice(self):
        assert default_choice(default_grades()) == "5"
        assert default_choice(OrderedMap()) is None


def test_grouped_keeps_runs_in_order():
    groups = list(grouped(default_sections()))
    assert [g for g, _ in groups] == ["A", "B"]
    assert groups[1][1] == ["SLB", "LWV", "CAN", "RWV", "ROF", "GLB", "VRT"]


def test_catalog_to_dict():
    assert catalog_to_dict(OrderedMap([("x", TaxonomyEntry("A", "X", 3))])) == {"x": {"group": "A", "label": "X", "sort": 3}}


def test_catalogs_are_ordered_maps():
    sections = default_sections()
    assert isinstance(sections, OrderedMap)
    assert sections.keys()[:3] == ["AB1", "AB2", "AB3"]
