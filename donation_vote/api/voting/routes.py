from flask import Blueprint, request, current_app
from flasgger import swag_from

from ...exceptions import AlreadyUsed, InvalidTarget, InvalidToken, StorageError
from ...schemas.vote import VoteSubmitSchema, SubmissionSchema
from ...services import factory
from ...utils.audit import safe_audit
from ...utils.validation import validate_or_abort

voting_bp = Blueprint("voting", __name__)
vote_submit_schema = VoteSubmitSchema()
submission_schema = SubmissionSchema()


@voting_bp.post("")
@swag_from({
    "tags": ["Voting"],
    "summary": "Spend a one-time token on a vote",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "token": {"type": "string", "example": "9f86d081884c7d659a2feaa0c55ad015"},
                "target_id": {"type": "integer", "example": 7},
            },
            "required": ["token", "target_id"],
        },
    }],
    "responses": {
        201: {"description": "Vote recorded"},
        400: {"description": "Validation error / invalid, expired or used token"},
        404: {"description": "Target not found or not open for votes"},
        409: {"description": "Token spent by a concurrent request"},
        500: {"description": "Server error"},
    },
})
def submit_vote():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(vote_submit_schema, payload)

    target_id = payload["target_id"]

    try:
        submission = factory.vote_consumption().consume(payload["token"], target_id)

    except InvalidToken as e:
        safe_audit(
            action="VOTE_SUBMIT_DENIED",
            entity_type="VOTE",
            details={"target_id": target_id, "reason": e.reason.lower()},
        )
        return {"message": e.message, "code": e.code}, 400

    except InvalidTarget as e:
        safe_audit(
            action="VOTE_SUBMIT_DENIED",
            entity_type="VOTE",
            details={"target_id": target_id, "reason": "invalid_target"},
        )
        return {"message": e.message, "code": e.code}, 404

    except AlreadyUsed as e:
        current_app.logger.info("Duplicate vote attempt target_id=%s", target_id)
        safe_audit(
            action="VOTE_DUPLICATE_ATTEMPT",
            entity_type="VOTE",
            details={"target_id": target_id},
        )
        return {"message": e.message, "code": e.code}, 409

    except StorageError:
        current_app.logger.exception("DB error while submitting vote")
        return {"message": "Failed to record vote"}, 500

    body = submission_schema.dump(submission)

    safe_audit(
        action="VOTE_SUBMITTED",
        entity_type="VOTE",
        entity_id=body["id"],
        details={"token_id": body["token_id"], "target_id": target_id, "order_id": body["external_ref"]},
    )

    return {
        "message": "Your vote has been recorded. Thank you! This link can't be used again.",
        "submission": body,
    }, 201
