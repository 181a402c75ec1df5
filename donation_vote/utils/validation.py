from flask import abort

def validate_or_abort(schema, payload):
    """Load payload through a marshmallow schema; 400 VALIDATION_ERROR on failure."""
    errors = schema.validate(payload)
    if errors:
        abort(
            400,
            description={
                "code": "VALIDATION_ERROR",
                "message": "Validation error",
                "errors": errors,
            },
        )
    return schema.load(payload)
