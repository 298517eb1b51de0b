from artifact_search.db.session import Base
from .models import ReviewRecord, Rating, ReviewStatus, HIDDEN_STATUSES

__all__ = [
    "Base",
    "ReviewRecord",
    "Rating",
    "ReviewStatus",
    "HIDDEN_STATUSES"
]
