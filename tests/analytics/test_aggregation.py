"""Tests de las agregaciones del dashboard."""

from panorama.analytics import (
    compute_kpis,
    compute_metrics,
    developer_year_matrix,
    export_rows,
    group_totals,
    launch_years,
    top_developers,
    top_records,
)


def test_kpis_sum_filtered_records(make_record):
    records = [
        make_record(launched_value=100, sold_value=40, total_units=10, units_sold=4),
        make_record(launched_value=50, sold_value=10, total_units=5, units_sold=1),
    ]

    kpis = compute_kpis(records)

    assert kpis.launched_value == 150
    assert kpis.sold_value == 50
    assert kpis.total_units == 15
    assert kpis.units_sold == 5
    assert kpis.count == 2
    assert round(kpis.sold_percentage, 2) == 33.33


def test_sold_percentage_undefined_without_launched_value():
    assert compute_kpis([]).sold_percentage is None


def test_city_groups_sorted_by_launched_value(make_record):
    records = [
        make_record(city="A", launched_value=100),
        make_record(city="B", launched_value=30),
        make_record(city="A", launched_value=50),
    ]

    groups = group_totals(records, "city")

    assert [(g.key, g.launched_value) for g in groups] == [("A", 150), ("B", 30)]


def test_ties_keep_first_seen_order(make_record):
    records = [
        make_record(city="Santos", launched_value=10),
        make_record(city="Americana", launched_value=10),
        make_record(city="Jundiaí", launched_value=10),
    ]

    assert [g.key for g in group_totals(records, "city")] == [
        "Santos",
        "Americana",
        "Jundiaí",
    ]


def test_top_groups_truncate_cities_but_not_types(make_record):
    records = [
        make_record(city=f"Cidade {i}", project_type=f"Tipo {i}", launched_value=i)
        for i in range(1, 13)
    ]

    metrics = compute_metrics(records)

    assert len(metrics.by_city) == 8
    assert metrics.by_city[0].key == "Cidade 12"
    assert len(metrics.by_type) == 12


def test_top_records_and_developers(make_record):
    records = [
        make_record(name=f"E{i}", developer=f"Dev {i % 8}", launched_value=i * 10)
        for i in range(15)
    ]

    assert [r.name for r in top_records(records)] == [
        f"E{i}" for i in range(14, 4, -1)
    ]
    developers = top_developers(records)
    assert len(developers) == 6
    # Dev 6: 60 + 140 = 200, Dev 5: 50 + 130 = 180
    assert developers[:2] == ["Dev 6", "Dev 5"]


def test_developer_year_matrix_fills_missing_cells_with_zero(make_record):
    records = [
        make_record(developer="Alfa", launch_year=2022, launched_value=10),
        make_record(developer="Alfa", launch_year=2022, launched_value=5),
        make_record(developer="Beta", launch_year=2024, launched_value=7),
        make_record(developer="Gama", launch_year=2024, launched_value=99),
    ]

    rows = developer_year_matrix(records, ["Alfa", "Beta"], [2022, 2023, 2024])

    assert [row.year for row in rows] == [2022, 2023, 2024]
    assert rows[0].values == {"Alfa": 15, "Beta": 0}
    assert rows[1].values == {"Alfa": 0, "Beta": 0}
    assert rows[2].values == {"Alfa": 0, "Beta": 7}


def test_matrix_years_come_from_universe(make_record):
    universe = [
        make_record(launch_year=2024, launched_value=1),
        make_record(launch_year=2020, launched_value=1, city="Santos"),
        make_record(launch_year=0, launched_value=1, city="Santos"),
    ]
    filtered = universe[:1]

    metrics = compute_metrics(filtered, universe)

    assert launch_years(universe) == [2020, 2024]
    assert [row.year for row in metrics.developer_by_year] == [2020, 2024]
    assert metrics.developer_by_year[0].values == {"Construtora A": 0}


def test_export_rows_are_ranked(make_record):
    records = [
        make_record(name=f"E{i}", launched_value=float(i)) for i in range(25)
    ]

    rows = export_rows(records)

    assert len(rows) == 20
    assert rows[0].rank == 1
    assert rows[0].name == "E24"
    assert rows[-1].rank == 20
    assert rows[-1].name == "E5"


def test_aggregations_do_not_mutate_input(make_record):
    records = [make_record(launched_value=1), make_record(launched_value=2)]
    snapshot = list(records)

    compute_metrics(records)

    assert records == snapshot
