import logging
from datetime import timedelta
from typing import Callable, NamedTuple

from ..exceptions import IssuanceError
from ..models.vote_token import VoteToken
from ..utils.time import utc_now_naive
from ..utils.token_secret import generate_secret
from .token_store import DuplicateSecret, TokenStore

logger = logging.getLogger(__name__)


class IssuedToken(NamedTuple):
    secret: str
    token: VoteToken


class TokenIssuer:
    def __init__(
        self,
        store: TokenStore,
        max_attempts: int = 3,
        secret_factory: Callable[[], str] = generate_secret,
        clock: Callable = utc_now_naive,
    ):
        self.store = store
        self.max_attempts = max(1, max_attempts)
        self.secret_factory = secret_factory
        self.clock = clock

    def issue(self, identity: str, external_ref: int, expiry_window: timedelta) -> str:
        """Create an ACTIVE token and return its raw secret."""
        return self.issue_token(identity, external_ref, expiry_window).secret

    def issue_token(self, identity: str, external_ref: int, expiry_window: timedelta) -> IssuedToken:
        identity = (identity or "").strip()
        if not identity:
            raise ValueError("identity must not be empty")
        if expiry_window <= timedelta(0):
            raise ValueError("expiry_window must be positive")

        for attempt in range(1, self.max_attempts + 1):
            secret = self.secret_factory()
            now = self.clock()
            try:
                expires_at = now + expiry_window
            except OverflowError as exc:
                raise ValueError("expiry_window is out of range") from exc
            try:
                token = self.store.create(
                    identity=identity,
                    external_ref=external_ref,
                    raw_secret=secret,
                    created_at=now,
                    expires_at=expires_at,
                )
            except DuplicateSecret:
                logger.warning(
                    "Secret collision issuing token external_ref=%s attempt=%d/%d",
                    external_ref, attempt, self.max_attempts,
                )
                continue
            logger.info("Issued vote token id=%s external_ref=%s", token.id, external_ref)
            return IssuedToken(secret, token)

        raise IssuanceError(f"Could not issue a unique token after {self.max_attempts} attempts")
