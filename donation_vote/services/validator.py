from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..models.vote_token import VoteToken
from ..utils.time import utc_now_naive
from .token_store import TokenStore

UNKNOWN = "UNKNOWN"
EXPIRED = "EXPIRED"
USED = "USED"
ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class TokenCheck:
    status: str
    token: Optional[VoteToken] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


class TokenValidator:
    """Read-only classification of a presented secret."""

    def __init__(self, store: TokenStore, clock: Callable = utc_now_naive):
        self.store = store
        self.clock = clock

    def check(self, secret: str | None, now: datetime | None = None) -> TokenCheck:
        if not secret:
            return TokenCheck(UNKNOWN)

        token = self.store.find_by_secret(secret)
        if token is None:
            return TokenCheck(UNKNOWN)
        # A spent token reports USED even once it is also past its expiry.
        if token.is_used():
            return TokenCheck(USED)
        if token.is_expired(now or self.clock()):
            return TokenCheck(EXPIRED)
        return TokenCheck(ACTIVE, token)
