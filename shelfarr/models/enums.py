"""
Shelfarr v1.0.0 - Enumerations
Closed value sets shared by models, schemas and services
"""

import enum


class ContentType(str, enum.Enum):
    """Top-level content classification driving rule selection and layout"""

    MOVIE = "MOVIE"
    TV_SHOW = "TV_SHOW"
    GAME = "GAME"


class OrganizeQueueStatus(str, enum.Enum):
    """
    Organize queue state machine

    PENDING -> PROCESSING -> COMPLETED
    PENDING -> SKIPPED
    any failure -> FAILED
    FAILED -> PROCESSING (retry) or SKIPPED
    COMPLETED and SKIPPED are final
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


# Items that still need a human decision
ACTIONABLE_QUEUE_STATUSES = (
    OrganizeQueueStatus.PENDING,
    OrganizeQueueStatus.PROCESSING,
    OrganizeQueueStatus.FAILED,
)


class RequestStatus(str, enum.Enum):
    """Lifecycle of a content request (tracking record)"""

    PENDING = "PENDING"
    SEARCHING = "SEARCHING"
    FOUND = "FOUND"
    DOWNLOADING = "DOWNLOADING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
