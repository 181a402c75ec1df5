from datetime import timedelta
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from flask import Blueprint, request, current_app
from flasgger import swag_from

from ...exceptions import IssuanceError, StorageError
from ...schemas.token import TokenIssueSchema, TokenIssuedSchema, TokenCheckSchema
from ...services import factory
from ...services.notifier import VOTING_LINK
from ...utils.audit import safe_audit
from ...utils.rbac import operator_required
from ...utils.validation import validate_or_abort

tokens_bp = Blueprint("tokens", __name__)
issue_schema = TokenIssueSchema()
issued_schema = TokenIssuedSchema()
check_schema = TokenCheckSchema()

LINK_PARAM = "don_token"


def build_token_link(base_url: str, secret: str) -> str:
    """Append ?don_token=<secret> to the protected page URL, keeping its own query."""
    parts = urlsplit(base_url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append((LINK_PARAM, secret))
    return urlunsplit(parts._replace(query=urlencode(query)))


def _send_link_email(email: str, data: dict) -> bool:
    """
    Best-effort delivery of the voting link. Issuance already committed,
    so a mail failure is logged and reported, never raised.
    """
    try:
        factory.notifier().notify(email, VOTING_LINK, data)
        return True
    except Exception:
        current_app.logger.exception("Voting link email failed for order_id=%s", data.get("order_id"))
        return False


@tokens_bp.post("")
@operator_required
@swag_from({
    "tags": ["Tokens"],
    "summary": "Issue a one-time voting token for a completed order",
    "description": "Called by the commerce system once per completed order. Emails the link unless send_email is false.",
    "security": [{"BearerAuth": []}],
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "email": {"type": "string", "example": "a@x.com"},
                "order_id": {"type": "integer", "example": 1001},
                "customer_name": {"type": "string", "example": "Ada"},
                "expiry_hours": {"type": "integer", "example": 24},
                "send_email": {"type": "boolean", "example": True},
            },
            "required": ["email", "order_id"],
        },
    }],
    "responses": {
        201: {"description": "Token issued"},
        400: {"description": "Validation error"},
        401: {"description": "Missing operator token"},
        403: {"description": "Forbidden"},
        500: {"description": "Issuance failed"},
    },
})
def issue_token():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(issue_schema, payload)

    email = payload["email"].lower().strip()
    order_id = payload["order_id"]
    expiry_hours = payload.get("expiry_hours")
    if expiry_hours is None:
        expiry_hours = current_app.config["TOKEN_EXPIRY_HOURS"]

    try:
        secret, token = factory.token_issuer().issue_token(
            identity=email,
            external_ref=order_id,
            expiry_window=timedelta(hours=expiry_hours),
        )
    except ValueError as e:
        return {"message": str(e)}, 400
    except (IssuanceError, StorageError):
        current_app.logger.exception("Token issuance failed for order_id=%s", order_id)
        return {"message": "Failed to issue voting token"}, 500

    token_id, expires_at = token.id, token.expires_at
    link = build_token_link(current_app.config["VOTE_PAGE_URL"], secret)

    email_sent = False
    if payload.get("send_email", True):
        email_sent = _send_link_email(email, {
            "customer_name": payload.get("customer_name") or email,
            "order_id": order_id,
            "link": link,
            "expiry_hours": expiry_hours,
        })

    safe_audit(
        action="TOKEN_ISSUED",
        entity_type="TOKEN",
        entity_id=str(token_id),
        details={"order_id": order_id, "expiry_hours": expiry_hours, "email_sent": email_sent},
    )

    return issued_schema.dump({
        "token_id": token_id,
        "token": secret,
        "link": link,
        "expires_at": expires_at,
        "email_sent": email_sent,
    }), 201


@tokens_bp.get("/check")
@operator_required
@swag_from({
    "tags": ["Tokens"],
    "summary": "Check a voting token (operator only; the public gate never reveals the status)",
    "security": [{"BearerAuth": []}],
    "parameters": [
        {"in": "query", "name": "token", "required": True, "type": "string"},
    ],
    "responses": {200: {"description": "Token status"}, 500: {"description": "Server error"}},
})
def check_token():
    secret = request.args.get("token", "")
    try:
        check = factory.token_validator().check(secret)
    except StorageError:
        current_app.logger.exception("DB error while checking token")
        return {"message": "Failed to check token"}, 500

    return check_schema.dump({
        "status": check.status.lower(),
        "expires_at": check.token.expires_at if check.token else None,
    }), 200
