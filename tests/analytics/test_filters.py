"""Tests del motor de filtros."""

import pytest

from panorama.analytics import (
    FilterEngine,
    active_filter_count,
    apply_filters,
    filter_options,
    matches,
    search_options,
)
from panorama.models import FilterSelection


class TestPredicate:
    def test_default_selection_matches_everything_in_domain(self, make_record):
        assert matches(make_record(), FilterSelection()) is True

    def test_empty_set_means_no_filter(self, make_record):
        selection = FilterSelection().toggle("states", "SP")

        assert matches(make_record(state="SP"), selection) is True
        assert matches(make_record(state="RJ"), selection) is False
        assert matches(make_record(state="RJ", city="Rio"), FilterSelection()) is True

    def test_dimensions_combine_with_and(self, make_record):
        selection = (
            FilterSelection()
            .toggle("cities", "Campinas")
            .toggle("developers", "Construtora A")
        )

        assert matches(make_record(), selection) is True
        assert matches(make_record(developer="Construtora B"), selection) is False

    def test_values_in_one_dimension_combine_with_or(self, make_record):
        selection = FilterSelection().toggle("cities", "Campinas").toggle("cities", "Santos")

        assert matches(make_record(city="Santos"), selection) is True
        assert matches(make_record(city="Jundiaí"), selection) is False

    def test_integer_dimensions(self, make_record):
        selection = FilterSelection().toggle("launch_years", 2024).toggle("bedrooms", 3)

        assert matches(make_record(launch_year=2024, bedrooms=3), selection) is True
        assert matches(make_record(launch_year=2023, bedrooms=3), selection) is False

    def test_ranges_are_inclusive(self, make_record):
        selection = FilterSelection().with_range("private_area", (50, 80))

        assert matches(make_record(private_area=50), selection) is True
        assert matches(make_record(private_area=80), selection) is True
        assert matches(make_record(private_area=80.01), selection) is False

    def test_default_ranges_exclude_out_of_domain_records(self, make_record):
        assert matches(make_record(private_area=2500), FilterSelection()) is False
        assert matches(make_record(price_per_area=150_000), FilterSelection()) is False

    def test_apply_preserves_order(self, make_record):
        records = [
            make_record(name="Uno", city="Santos"),
            make_record(name="Dos"),
            make_record(name="Tres", city="Santos"),
        ]
        selection = FilterSelection().toggle("cities", "Santos")

        assert [r.name for r in apply_filters(records, selection)] == ["Uno", "Tres"]


class TestSelection:
    def test_toggle_adds_then_removes(self):
        selection = FilterSelection().toggle("cities", "Campinas")
        assert selection.cities == frozenset({"Campinas"})

        assert selection.toggle("cities", "Campinas").cities == frozenset()

    def test_toggle_returns_new_selection(self):
        original = FilterSelection()
        original.toggle("states", "SP")

        assert original.states == frozenset()

    def test_unknown_dimension_raises(self):
        with pytest.raises(ValueError):
            FilterSelection().toggle("colores", "azul")
        with pytest.raises(ValueError):
            FilterSelection().with_range("cities", (0, 1))

    def test_default_selection_is_reset_state(self):
        selection = FilterSelection().toggle("cities", "Campinas").with_range(
            "average_price", (100_000, 500_000)
        )
        engine = FilterEngine(selection)

        assert engine.reset() == FilterSelection()


class TestActiveCount:
    def test_default_counts_zero(self):
        assert active_filter_count(FilterSelection()) == 0

    def test_counts_values_plus_changed_ranges(self):
        selection = (
            FilterSelection()
            .toggle("cities", "Campinas")
            .toggle("cities", "Santos")
            .with_range("average_price", (100_000, 500_000))
        )
        assert active_filter_count(selection) == 3

    def test_range_back_at_default_does_not_count(self):
        selection = FilterSelection().with_range("private_area", (0, 2000))
        assert active_filter_count(selection) == 0

    def test_engine_tracks_changes(self, make_record):
        engine = FilterEngine()
        engine.toggle("states", "RJ")
        engine.set_range("price_per_area", (1_000, 5_000))

        assert engine.active_count == 2
        assert engine.matches(make_record(state="RJ", price_per_area=3_000)) is True
        assert engine.apply([make_record()]) == []


class TestOptions:
    def test_options_are_sorted_and_years_descending(self, make_record):
        records = [
            make_record(city="Santos", launch_year=2021, bedrooms=3),
            make_record(city="Campinas", launch_year=2024, bedrooms=1),
            make_record(city="Americana", launch_year=2022, bedrooms=3),
        ]

        options = filter_options(records)

        assert options["cities"] == ["Americana", "Campinas", "Santos"]
        assert options["launch_years"] == [2024, 2022, 2021]
        assert options["bedrooms"] == [1, 3]

    def test_options_skip_empty_and_zero(self, make_record):
        records = [make_record(neighborhood="", launch_year=0), make_record()]

        options = filter_options(records)

        assert options["neighborhoods"] == ["Cambuí"]
        assert options["launch_years"] == [2023]

    def test_search_is_case_insensitive_substring(self):
        options = ["Campinas", "Santos", "São Paulo", "Campo Grande"]

        assert search_options(options, "camp") == ["Campinas", "Campo Grande"]
        assert search_options(options, "") == options

    def test_search_caps_results(self):
        options = [f"Cidade {i:03d}" for i in range(120)]

        assert len(search_options(options, "cidade")) == 50
        assert len(search_options(options, "cidade", limit=None)) == 120
