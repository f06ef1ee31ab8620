"""
Vehicle aggregation service for the dashboard vehicle analysis.

A "vehicle" is the campaign/product tag a generated image advertises. This
service cross-tabulates vehicles and clients over the filtered slice and
produces the three blocks of the vehicle analysis:

1. stats: one VehicleStat per distinct vehicle
   - totalImages = images for the vehicle
   - percentOfTotal = totalImages * 100 / all vehicle images, rounded half-up
     to one decimal
   - topClient = client with most images for the vehicle (first-seen on ties)
   - descending by totalImages, first-seen vehicle order on ties
2. clientStats: one ClientVehicleStat per client
   - uniqueVehicleCount = distinct vehicles the client produced
   - totalImages = the client's images
   - descending by totalImages, first-seen client order on ties
3. summary: totalVehicles, totalImages, mostImages / leastImages (first / last
   vehicle of the ranked list) and mostActiveClient (first ranked client)

Records without a vehicle are excluded up front. Records without a client are
grouped under the unknown-client label. When nothing is left after the vehicle
exclusion every block is empty, counts are 0 and extremes are None; no sort or
division is attempted.
"""

import logging
from typing import Dict, List, Sequence, Set

from publication_analytics.models.schemas import (
    ClientVehicleStat,
    NamedCount,
    PublicationRecord,
    VehicleAnalysis,
    VehicleStat,
    VehicleSummary,
)
from publication_analytics.services.grouping import rank_counts, top_entry
from publication_analytics.services.metrics import percent_of_1dp


logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_LABEL: str = "Unknown"


def aggregate_vehicles(
    records: Sequence[PublicationRecord],
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL
) -> VehicleAnalysis:
    """
    Build the vehicle analysis for a filtered slice.

    Args:
        records: Filtered publication records.
        unknown_client_label: Client label for records with no client name.

    Returns:
        VehicleAnalysis with summary, per-vehicle stats and per-client stats.

    Example:
        >>> # SUV x4 (clientA x3, clientB x1), Sedan x1 (clientC)
        >>> analysis = aggregate_vehicles(records)
        >>> [(s.vehicle, s.totalImages, s.percentOfTotal, s.topClient) for s in analysis.stats]
        [('SUV', 4, 80.0, 'clientA'), ('Sedan', 1, 20.0, 'clientC')]
    """
    tagged = [r for r in records if r.vehicle is not None]
    if not tagged:
        return VehicleAnalysis()

    def client_of(record: PublicationRecord) -> str:
        return record.clientName if record.clientName is not None else unknown_client_label

    # One pass, three groupings
    vehicle_counts: Dict[str, int] = {}
    client_totals: Dict[str, int] = {}
    vehicle_client_counts: Dict[str, Dict[str, int]] = {}

    for record in tagged:
        vehicle = record.vehicle
        client = client_of(record)
        vehicle_counts[vehicle] = vehicle_counts.get(vehicle, 0) + 1
        client_totals[client] = client_totals.get(client, 0) + 1
        per_client = vehicle_client_counts.setdefault(vehicle, {})
        per_client[client] = per_client.get(client, 0) + 1

    # Distinct vehicles per client, counted on their own
    client_vehicles: Dict[str, Set[str]] = {}
    for record in tagged:
        client_vehicles.setdefault(client_of(record), set()).add(record.vehicle)

    total_images = len(tagged)
    ranked_vehicles = rank_counts(vehicle_counts)
    ranked_clients = rank_counts(client_totals)

    stats: List[VehicleStat] = []
    for vehicle, count in ranked_vehicles:
        top_client = top_entry(vehicle_client_counts[vehicle])
        stats.append(VehicleStat(
            vehicle=vehicle,
            totalImages=count,
            percentOfTotal=percent_of_1dp(count, total_images),
            topClient=top_client[0],
        ))

    client_stats = [
        ClientVehicleStat(
            clientName=client,
            uniqueVehicleCount=len(client_vehicles[client]),
            totalImages=count,
        )
        for client, count in ranked_clients
    ]

    most_vehicle, most_count = ranked_vehicles[0]
    least_vehicle, least_count = ranked_vehicles[-1]
    top_client_name, top_client_count = ranked_clients[0]

    summary = VehicleSummary(
        totalVehicles=len(vehicle_counts),
        totalImages=total_images,
        mostImages=NamedCount(name=most_vehicle, count=most_count),
        leastImages=NamedCount(name=least_vehicle, count=least_count),
        mostActiveClient=NamedCount(name=top_client_name, count=top_client_count),
    )

    logger.debug(
        f"Vehicle analysis: {summary.totalVehicles} vehicles, "
        f"{total_images} images, {len(client_stats)} clients"
    )

    return VehicleAnalysis(summary=summary, stats=stats, clientStats=client_stats)
