from marshmallow import Schema, fields, validate

MAX_EXPIRY_HOURS = 24 * 366


class TokenIssueSchema(Schema):
    email = fields.Email(required=True)
    order_id = fields.Int(required=True, strict=True, validate=validate.Range(min=1))
    customer_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=190))
    # Falls back to TOKEN_EXPIRY_HOURS; capped at one year
    expiry_hours = fields.Int(
        required=False, allow_none=True, strict=True,
        validate=validate.Range(min=1, max=MAX_EXPIRY_HOURS),
    )
    send_email = fields.Bool(required=False, load_default=True)

class TokenIssuedSchema(Schema):
    token_id = fields.UUID(required=True)
    token = fields.Str(required=True)
    link = fields.Str(required=True)
    expires_at = fields.DateTime(required=True)
    email_sent = fields.Bool(required=True)

class TokenCheckSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf(["unknown", "expired", "used", "active"]))
    expires_at = fields.DateTime(allow_none=True)
