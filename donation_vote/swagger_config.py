def swagger_template(app=None):
    title = "Donation Vote API"
    version = "1.0.0"

    if app:
        title = app.config.get("SWAGGER_TITLE", title)
        version = app.config.get("SWAGGER_VERSION", version)

    return {
        "swagger": "2.0",
        "info": {
            "title": title,
            "version": version,
            "description": "One-time voting links issued per completed order.",
        },
        "securityDefinitions": {
            "BearerAuth": {
                "type": "apiKey",
                "name": "Authorization",
                "in": "header",
                "description": "Operator JWT: Bearer <token> with role OPERATOR or SYSTEM_ADMIN"
            }
        },
        "definitions": {
            "ErrorResponse": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean", "example": False},
                    "error": {
                        "type": "object",
                        "properties": {
                            "code": {"type": "string", "example": "VALIDATION_ERROR"},
                            "message": {"type": "string", "example": "Validation error"},
                            "details": {"type": "object"}
                        }
                    },
                    "request_id": {"type": "string"}
                }
            },
            "Submission": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "token_id": {"type": "string", "format": "uuid"},
                    "identity": {"type": "string"},
                    "target_ref": {"type": "integer"},
                    "target_name": {"type": "string"},
                    "external_ref": {"type": "integer"},
                    "created_at": {"type": "string", "format": "date-time"}
                }
            }
        }
    }
