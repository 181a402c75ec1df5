from flask import Blueprint, request, current_app
from flasgger import swag_from

from ...exceptions import StorageError
from ...services import factory

gate_bp = Blueprint("gate", __name__)


@gate_bp.get("/<string:resource>")
@swag_from({
    "tags": ["Gate"],
    "summary": "Decide whether a page may be shown for a token",
    "description": (
        "Protected resources return 200 with the token expiry when the link is usable. "
        "Unknown, expired and already used links all get the same 410 response. "
        "Resources that are not protected return 200 with gated=false and no token check."
    ),
    "parameters": [
        {"in": "path", "name": "resource", "required": True, "type": "string"},
        {"in": "query", "name": "don_token", "required": False, "type": "string"},
    ],
    "responses": {200: {"description": "Allowed"}, 410: {"description": "Link no longer available"}},
})
def gate(resource):
    secret = request.args.get("don_token", "")
    try:
        decision = factory.gate().decide(secret, resource)
    except StorageError:
        current_app.logger.exception("DB error at gate for resource=%s", resource)
        return {"message": "Service temporarily unavailable"}, 503

    if not decision.gated:
        return {"allowed": True, "gated": False, "resource": resource}, 200

    if not decision.allowed:
        # Anonymous traffic; keep it out of the audit table
        current_app.logger.info("Gate denied resource=%s has_token=%s", resource, bool(secret))
        return {"allowed": False, "message": decision.message}, 410

    return {
        "allowed": True,
        "gated": True,
        "resource": resource,
        # The page posts this back with the vote
        "token": secret,
        "expires_at": decision.token.expires_at.isoformat() + "Z",
    }, 200
