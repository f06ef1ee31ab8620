"""
Client ranking aggregation service.

Ranks clients by number of generated images in the filtered slice. The
ranking belongs to the "all clients" query mode; run over a single-client
slice it degenerates to one entry.

Rules:
- Records without a client name are excluded
- Descending by total; ties keep first-seen client order
- Truncated to the top RANKING_LIMIT entries (15); ties past the cut are dropped
"""

from typing import List, Optional, Sequence

from publication_analytics.models.schemas import PublicationRecord, RankingEntry
from publication_analytics.services.grouping import group_and_rank


RANKING_LIMIT: int = 15


def aggregate_ranking(
    records: Sequence[PublicationRecord],
    limit: Optional[int] = RANKING_LIMIT
) -> List[RankingEntry]:
    """
    Build the top-N client ranking.

    Args:
        records: Filtered publication records.
        limit: Maximum number of entries (None keeps every client).

    Returns:
        RankingEntry list, highest total first.
    """
    ranked = group_and_rank(records, key=lambda r: r.clientName, limit=limit)
    return [RankingEntry(name=name, total=total) for name, total in ranked]
