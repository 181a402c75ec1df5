from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import StorageError
from ..models.target import Target


@dataclass(frozen=True)
class TargetInfo:
    exists: bool
    published: bool = False
    display_name: str = ""

    @property
    def eligible(self) -> bool:
        return self.exists and self.published


class SqlTargetResolver:
    """Resolves vote targets from the vote_targets table."""

    def __init__(self, session):
        self.session = session

    def resolve(self, target_ref: int) -> TargetInfo:
        try:
            target = self.session.get(Target, target_ref)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError() from exc
        if target is None:
            return TargetInfo(exists=False)
        return TargetInfo(exists=True, published=target.is_published(), display_name=target.name)
