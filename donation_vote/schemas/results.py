from marshmallow import Schema, fields

class TargetTotalSchema(Schema):
    target_ref = fields.Int(required=True)
    target_name = fields.Str(required=True)
    votes = fields.Int(required=True)

class ResultsSchema(Schema):
    total_votes = fields.Int(required=True)
    results = fields.List(fields.Nested(TargetTotalSchema), required=True)
