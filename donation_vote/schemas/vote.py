from marshmallow import Schema, fields, validate

class VoteSubmitSchema(Schema):
    token = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    target_id = fields.Int(required=True, strict=True, validate=validate.Range(min=1))

class SubmissionSchema(Schema):
    id = fields.UUID()
    token_id = fields.UUID()
    identity = fields.Str()
    target_ref = fields.Int()
    target_name = fields.Str()
    external_ref = fields.Int()
    created_at = fields.DateTime()
