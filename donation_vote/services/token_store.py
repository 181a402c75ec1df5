import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..exceptions import AlreadyUsed, StorageError
from ..models.submission import Submission
from ..models.vote_token import VoteToken
from ..utils.token_secret import secret_digest

logger = logging.getLogger(__name__)


class DuplicateSecret(StorageError):
    """The digest of a freshly generated secret already exists."""

    code = "DUPLICATE_SECRET"


def _is_secret_collision(exc: IntegrityError) -> bool:
    # SQLite names the column, Postgres the unique index (ix_vote_tokens_secret_hash)
    return "secret_hash" in str(exc.orig)


class TokenStore:
    """
    Durable table of issued vote tokens.

    Owns the three writes/reads the core needs: create a token, look it up by
    its raw secret, and the compare-and-swap commit that spends a token and
    records its submission. Rows are never deleted.
    """

    def __init__(self, session, digest_key: str):
        self.session = session
        self.digest_key = digest_key

    def digest(self, raw_secret: str) -> str:
        return secret_digest(raw_secret, self.digest_key)

    def create(
        self,
        identity: str,
        external_ref: int,
        raw_secret: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> VoteToken:
        token = VoteToken(
            identity=identity,
            external_ref=external_ref,
            secret_hash=self.digest(raw_secret),
            status=VoteToken.STATUS_ACTIVE,
            created_at=created_at,
            expires_at=expires_at,
        )
        try:
            self.session.add(token)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if _is_secret_collision(exc):
                raise DuplicateSecret("Token secret already issued") from exc
            logger.exception("Integrity error while creating vote token external_ref=%s", external_ref)
            raise StorageError() from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("DB error while creating vote token external_ref=%s", external_ref)
            raise StorageError() from exc
        return token

    def find_by_secret(self, raw_secret: str) -> VoteToken | None:
        try:
            return self.session.execute(
                select(VoteToken).where(VoteToken.secret_hash == self.digest(raw_secret))
            ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("DB error while looking up vote token")
            raise StorageError() from exc

    def commit_consumption(
        self,
        token: VoteToken,
        target_ref: int,
        target_name: str,
        now: datetime,
    ) -> Submission:
        """
        Spend `token` and record its submission in one transaction.

        The status flip is a conditional UPDATE scoped to this token's row:
        it only matches while the row still reads ACTIVE and unexpired, so of
        any number of racing callers at most one sees a row count of 1. The
        losers roll back without touching the winner's submission.
        """
        token_id, identity, external_ref = token.id, token.identity, token.external_ref
        try:
            result = self.session.execute(
                update(VoteToken)
                .where(
                    VoteToken.id == token_id,
                    VoteToken.status == VoteToken.STATUS_ACTIVE,
                    VoteToken.expires_at > now,
                )
                .values(status=VoteToken.STATUS_USED, used_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                self.session.rollback()
                logger.info("Lost consume race token_id=%s", token_id)
                raise AlreadyUsed()

            submission = Submission(
                token_id=token_id,
                identity=identity,
                target_ref=target_ref,
                target_name=target_name,
                external_ref=external_ref,
                created_at=now,
            )
            self.session.add(submission)
            self.session.flush()
            # Hand back a detached, fully loaded row so callers never refresh it after the commit
            self.session.expunge(submission)
            self.session.commit()
        except IntegrityError as exc:
            # A submission for this token already exists
            self.session.rollback()
            logger.info("Duplicate submission rejected token_id=%s", token_id)
            raise AlreadyUsed() from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("DB error while committing vote token_id=%s", token_id)
            raise StorageError() from exc
        return submission
