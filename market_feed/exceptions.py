"""
Exception hierarchy for feed collection.

Every error raised by the collector and the provider adapters derives from
FeedError. The concrete classes also subclass the matching builtin so that
callers written against plain ValueError / ConnectionError keep working.

Classes:
    FeedError: Base class for all feed errors
    FeedConfigurationError: Invalid request parameters (raised before connecting)
    FeedConnectionError: Connection could not be opened or broke abnormally
    FeedDecodeError: A single inbound frame could not be decoded
"""

from typing import Optional


class FeedError(Exception):
    """Base class for feed collection errors."""


class FeedConfigurationError(FeedError, ValueError):
    """
    Raised when a stream request or adapter call is misconfigured.

    Always raised synchronously, before any connection attempt.
    """


class FeedConnectionError(FeedError, ConnectionError):
    """
    Raised when the streaming connection fails.

    Covers refused connections, DNS failures, protocol handshake failures,
    subscription send failures and abnormal closes mid-run.

    Attributes:
        message: Error message.
        target: Connection target the error relates to.
        cause: Original exception, if any.
    """

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.target = target
        self.cause = cause
        super().__init__(message)


class FeedDecodeError(FeedError, ValueError):
    """
    Raised when an inbound frame cannot be decoded or transformed.

    Attributes:
        message: Error message.
        frame: Leading part of the offending frame, for logging.
    """

    def __init__(self, message: str, frame: Optional[str] = None):
        self.message = message
        self.frame = frame
        super().__init__(message)
