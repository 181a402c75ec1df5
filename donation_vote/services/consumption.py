"""
Vote consumption: the one place a token moves from ACTIVE to USED.

    Presented -> Validated -> Eligible -> Committed

Every step is a hard gate. A failure at any step raises a ConsumeError
subclass (or StorageError) and leaves the token untouched. Notifications
run only after the commit and can never turn a committed vote into a
failure.
"""
import logging
from typing import Callable

from ..exceptions import InvalidTarget, InvalidToken
from ..models.submission import Submission
from ..utils.time import utc_now_naive
from .notifier import VOTE_CONFIRMATION, VOTE_SUBMITTED
from .targets import SqlTargetResolver
from .token_store import TokenStore
from .validator import TokenValidator

logger = logging.getLogger(__name__)


class VoteConsumption:
    def __init__(
        self,
        store: TokenStore,
        validator: TokenValidator,
        resolver: SqlTargetResolver,
        notifier=None,
        clock: Callable = utc_now_naive,
    ):
        self.store = store
        self.validator = validator
        self.resolver = resolver
        self.notifier = notifier
        self.clock = clock

    def consume(self, secret: str, target_ref: int) -> Submission:
        # One instant for both the expiry check and the conditional update
        now = self.clock()

        check = self.validator.check(secret, now=now)
        if not check.is_active:
            raise InvalidToken(check.status)
        token = check.token

        target = self.resolver.resolve(target_ref)
        if not target.eligible:
            logger.info("Vote rejected for ineligible target_ref=%s token_id=%s", target_ref, token.id)
            raise InvalidTarget()

        submission = self.store.commit_consumption(
            token,
            target_ref=target_ref,
            target_name=target.display_name,
            now=now,
        )
        logger.info("Vote recorded submission_id=%s token_id=%s target_ref=%s",
                    submission.id, submission.token_id, target_ref)

        self._notify(submission)
        return submission

    def _notify(self, submission: Submission) -> None:
        if self.notifier is None:
            return

        try:
            self.notifier.notify(submission.identity, VOTE_CONFIRMATION, {
                "customer_name": submission.identity,
                "platform": submission.target_name,
                "order_id": submission.external_ref,
            })
        except Exception:
            logger.exception("Vote confirmation failed submission_id=%s", submission.id)

        try:
            self.notifier.notify_operator(VOTE_SUBMITTED, {
                "customer_name": submission.identity,
                "customer_email": submission.identity,
                "platform": submission.target_name,
                "order_id": submission.external_ref,
                "submission_date": submission.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            })
        except Exception:
            logger.exception("Operator vote notification failed submission_id=%s", submission.id)
