from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import StorageError
from ..models.submission import Submission


class SubmissionLedger:
    """Read side of the append-only submissions table."""

    def __init__(self, session):
        self.session = session

    def _run(self, stmt):
        try:
            return self.session.execute(stmt)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError() from exc

    def totals_by_target(self) -> list[dict]:
        votes = func.count(Submission.id).label("votes")
        rows = self._run(
            select(Submission.target_ref, Submission.target_name, votes)
            .group_by(Submission.target_ref, Submission.target_name)
            .order_by(votes.desc(), Submission.target_ref.asc())
        ).all()
        return [
            {"target_ref": r.target_ref, "target_name": r.target_name, "votes": int(r.votes)}
            for r in rows
        ]

    def for_token(self, token_id) -> Submission | None:
        return self._run(select(Submission).where(Submission.token_id == token_id)).scalar_one_or_none()

    def count_for_token(self, token_id) -> int:
        return self._run(
            select(func.count(Submission.id)).where(Submission.token_id == token_id)
        ).scalar_one()
