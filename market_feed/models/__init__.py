"""
Shared Pydantic data models for feed collection.

Modules:
    stream: Collection run request and raw outcome
    sample: Normalized samples and the uniform FeedResult

Example:
    >>> from market_feed.models import FeedResult, Sample, StreamRequest
"""

from market_feed.models.sample import FeedResult, FeedStats, Sample
from market_feed.models.stream import (
    CollectedFeed,
    DecodeErrorPolicy,
    FeedState,
    StopReason,
    StreamQuery,
    StreamRequest,
)

__all__ = [
    # Run
    "StreamRequest",
    "StreamQuery",
    "CollectedFeed",
    "DecodeErrorPolicy",
    "FeedState",
    "StopReason",
    # Results
    "Sample",
    "FeedStats",
    "FeedResult",
]
