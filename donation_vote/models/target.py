from ..extensions import db
from ..utils.time import utc_now_naive

class Target(db.Model):
    """A votable resource ("platform"). Only what the target resolver reads."""

    __tablename__ = "vote_targets"

    STATUS_DRAFT = "DRAFT"
    STATUS_PUBLISHED = "PUBLISHED"

    id = db.Column(db.BigInteger().with_variant(db.Integer, "sqlite"), primary_key=True)
    name = db.Column(db.String(190), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_DRAFT)

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive)

    def is_published(self) -> bool:
        return self.status == self.STATUS_PUBLISHED
