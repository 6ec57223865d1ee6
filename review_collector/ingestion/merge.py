"""
Deduplication of an ingestion batch into canonical records.
"""
from typing import Dict, Iterable, List

from review_collector.schemas.review import Review, ReviewKey


def merge_reviews(reviews: Iterable[Review]) -> List[Review]:
    """
    Collapse a batch by (id, store, region).

    Later reviews replace earlier ones with the same key. The result keeps
    the position of each key's first appearance. Duplicates across runs are
    resolved by the storage upsert, not here.
    """
    merged: Dict[ReviewKey, Review] = {}
    for review in reviews:
        merged[review.key] = review
    return list(merged.values())
