from .vote_token import VoteToken  # noqa: F401
from .submission import Submission  # noqa: F401
from .target import Target  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "VoteToken",
    "Submission",
    "Target",
    "AuditLog",
]
