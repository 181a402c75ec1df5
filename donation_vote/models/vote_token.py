import uuid
from ..extensions import db
from ..utils.time import utc_now_naive

class VoteToken(db.Model):
    __tablename__ = "vote_tokens"

    STATUS_ACTIVE = "ACTIVE"
    STATUS_USED = "USED"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    identity = db.Column(db.String(190), nullable=False, index=True)
    external_ref = db.Column(db.BigInteger, nullable=False, index=True)

    # Store only a digest of the secret; the raw value goes out in the link
    secret_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    status = db.Column(db.String(10), nullable=False, default=STATUS_ACTIVE, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    used_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.CheckConstraint("expires_at > created_at", name="ck_vote_tokens_expiry_after_creation"),
        db.CheckConstraint("status IN ('ACTIVE', 'USED')", name="ck_vote_tokens_status"),
    )

    def is_used(self) -> bool:
        return self.status == self.STATUS_USED

    def is_expired(self, now=None) -> bool:
        return (now or utc_now_naive()) >= self.expires_at
