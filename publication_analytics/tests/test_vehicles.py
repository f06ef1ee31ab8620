"""
Test Module for the vehicle aggregation service.

Validates:
- The SUV / Sedan reference scenario (stats, top clients, summary extremes)
- Exclusion of records without a vehicle, unknown-client grouping
- Unique vehicle counts per client, independent of repeated use
- Stable tie-breaks for vehicles, clients and top client per vehicle
- The empty-slice contract (empty lists, zero counts, no extremes)
"""

from typing import List

import pytest

from publication_analytics.models import PublicationRecord, VehicleAnalysis
from publication_analytics.services.vehicles import UNKNOWN_CLIENT_LABEL, aggregate_vehicles
from publication_analytics.tests.conftest import make_record


class TestVehicleScenario:
    """SUV x4 (clientA x3, clientB x1), Sedan x1 (clientC)."""

    @pytest.mark.scenario
    def test_stats(self, vehicle_scenario_records: List[PublicationRecord]) -> None:
        analysis = aggregate_vehicles(vehicle_scenario_records)

        assert [
            (s.vehicle, s.totalImages, s.percentOfTotal, s.topClient) for s in analysis.stats
        ] == [
            ("SUV", 4, 80.0, "clientA"),
            ("Sedan", 1, 20.0, "clientC"),
        ]

    @pytest.mark.scenario
    def test_summary(self, vehicle_scenario_records: List[PublicationRecord]) -> None:
        summary = aggregate_vehicles(vehicle_scenario_records).summary

        assert summary.totalVehicles == 2
        assert summary.totalImages == 5
        assert (summary.mostImages.name, summary.mostImages.count) == ("SUV", 4)
        assert (summary.leastImages.name, summary.leastImages.count) == ("Sedan", 1)
        assert (summary.mostActiveClient.name, summary.mostActiveClient.count) == ("clientA", 3)

    def test_client_stats(self, vehicle_scenario_records: List[PublicationRecord]) -> None:
        client_stats = aggregate_vehicles(vehicle_scenario_records).clientStats

        assert [
            (c.clientName, c.uniqueVehicleCount, c.totalImages) for c in client_stats
        ] == [
            ("clientA", 1, 3),
            ("clientB", 1, 1),
            ("clientC", 1, 1),
        ]


class TestVehicleRules:
    """Exclusion, sentinel client and tie-break rules."""

    def test_records_without_vehicle_are_excluded(self) -> None:
        records = [
            make_record(vehicle="SUV"),
            make_record(vehicle=None),
            make_record(vehicle="   "),
        ]

        analysis = aggregate_vehicles(records)

        assert analysis.summary.totalImages == 1
        assert [s.vehicle for s in analysis.stats] == ["SUV"]

    def test_missing_client_uses_unknown_label(self) -> None:
        analysis = aggregate_vehicles([make_record(client=None, vehicle="SUV")])

        assert analysis.stats[0].topClient == UNKNOWN_CLIENT_LABEL
        assert analysis.clientStats[0].clientName == UNKNOWN_CLIENT_LABEL

    def test_custom_unknown_label(self) -> None:
        analysis = aggregate_vehicles(
            [make_record(client=None, vehicle="SUV")],
            unknown_client_label="Sem cliente",
        )

        assert analysis.summary.mostActiveClient.name == "Sem cliente"

    def test_unique_vehicle_count_ignores_repeats(self) -> None:
        records = [
            make_record(client="clientA", vehicle="SUV"),
            make_record(client="clientA", vehicle="SUV"),
            make_record(client="clientA", vehicle="Sedan"),
            make_record(client="clientA", vehicle="SUV"),
        ]

        stat = aggregate_vehicles(records).clientStats[0]

        assert (stat.uniqueVehicleCount, stat.totalImages) == (2, 4)

    def test_vehicle_ties_keep_first_seen_order(self) -> None:
        records = [
            make_record(vehicle="Sedan"),
            make_record(vehicle="SUV"),
            make_record(vehicle="Hatch"),
            make_record(vehicle="SUV"),
            make_record(vehicle="Sedan"),
        ]

        analysis = aggregate_vehicles(records)

        assert [s.vehicle for s in analysis.stats] == ["Sedan", "SUV", "Hatch"]
        assert analysis.summary.mostImages.name == "Sedan"
        assert analysis.summary.leastImages.name == "Hatch"

    def test_top_client_ties_keep_first_seen_order(self) -> None:
        records = [
            make_record(client="clientB", vehicle="SUV"),
            make_record(client="clientA", vehicle="SUV"),
            make_record(client="clientA", vehicle="SUV"),
            make_record(client="clientB", vehicle="SUV"),
        ]

        assert aggregate_vehicles(records).stats[0].topClient == "clientB"

    def test_percent_of_total_one_decimal(self) -> None:
        records = [
            make_record(vehicle="A"),
            make_record(vehicle="B"),
            make_record(vehicle="C"),
        ]

        assert [s.percentOfTotal for s in aggregate_vehicles(records).stats] == [33.3, 33.3, 33.3]

    def test_summary_total_matches_stats(self, mixed_records: List[PublicationRecord]) -> None:
        analysis = aggregate_vehicles(mixed_records)
        with_vehicle = [r for r in mixed_records if r.vehicle is not None]

        assert analysis.summary.totalImages == sum(s.totalImages for s in analysis.stats)
        assert analysis.summary.totalImages == len(with_vehicle)
        assert sum(c.totalImages for c in analysis.clientStats) == len(with_vehicle)


class TestEmptySlice:
    """Empty input, or nothing left after the vehicle exclusion."""

    EXPECTED = {
        "summary": {
            "totalVehicles": 0,
            "totalImages": 0,
            "mostImages": None,
            "leastImages": None,
            "mostActiveClient": None,
        },
        "stats": [],
        "clientStats": [],
    }

    def test_empty_input(self) -> None:
        assert aggregate_vehicles([]).model_dump() == self.EXPECTED

    def test_no_record_has_a_vehicle(self) -> None:
        records = [make_record(vehicle=None), make_record(vehicle="")]

        analysis = aggregate_vehicles(records)

        assert analysis == VehicleAnalysis()
        assert analysis.model_dump() == self.EXPECTED
