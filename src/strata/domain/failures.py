"""Classification types for errors raised while reading a download body."""

import enum
from dataclasses import dataclass


class FailureKind(enum.StrEnum):
    """How a failure during a body read must be handled."""

    RECOVERABLE = "recoverable"  # Resume with a continuation request
    FATAL = "fatal"  # Abort the download, never retried
    NOT_IO = "not_io"  # Not a transport failure, propagate untouched


@dataclass(frozen=True)
class ContinuationPolicy:
    """Tunables for deciding which body read failures may be resumed.

    Attributes:
        timeouts_fatal: Treat interrupted I/O (read and connect timeouts) as
            fatal. Disable to resume downloads after a stalled read.
    """

    timeouts_fatal: bool = True
