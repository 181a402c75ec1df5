import uuid
from sqlalchemy.dialects.postgresql import JSONB
from ..extensions import db
from ..utils.time import utc_now_naive

class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    # Operator subject from the JWT (nullable for token holders/system)
    actor = db.Column(db.String(190), nullable=True, index=True)
    actor_role = db.Column(db.String(30), nullable=True)

    # What happened
    action = db.Column(db.String(80), nullable=False, index=True)  # e.g. VOTE_SUBMITTED
    entity_type = db.Column(db.String(50), nullable=True, index=True)  # e.g. TOKEN, VOTE
    entity_id = db.Column(db.String(64), nullable=True, index=True)

    # Request context
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    details = db.Column(db.JSON().with_variant(JSONB, "postgresql"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive, index=True)
