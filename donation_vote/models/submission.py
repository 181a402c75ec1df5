import uuid
from ..extensions import db
from ..utils.time import utc_now_naive

class Submission(db.Model):
    __tablename__ = "vote_submissions"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    # One submission per consumed token
    token_id = db.Column(db.Uuid, db.ForeignKey("vote_tokens.id"), nullable=False, unique=True)

    identity = db.Column(db.String(190), nullable=False, index=True)
    target_ref = db.Column(db.BigInteger, nullable=False, index=True)
    # Label as it read when the vote was cast
    target_name = db.Column(db.String(190), nullable=False)
    external_ref = db.Column(db.BigInteger, nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now_naive)
