"""
Feed collection primitive.

Components:
    FeedCollector: Runs one bounded collection over a WebSocket connection
    decode_frame: Frame -> structured value decoding
    validate_request: Up-front StreamRequest validation
"""

from market_feed.feed.collector import FeedCollector, decode_frame, validate_request

__all__ = [
    "FeedCollector",
    "decode_frame",
    "validate_request",
]
