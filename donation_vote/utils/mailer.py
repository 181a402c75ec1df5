from flask_mail import Message
from flask import current_app
from ..extensions import mail

def render_placeholders(template: str, data: dict) -> str:
    """Replace {placeholder} tokens; unknown placeholders are left as-is."""
    out = template or ""
    for key, value in data.items():
        out = out.replace("{" + key + "}", "" if value is None else str(value))
    return out

def send_email(to_email: str, subject: str, body: str) -> None:
    sender = current_app.config.get("MAIL_DEFAULT_SENDER")
    if not sender:
        # Fail fast with a meaningful message (instead of Flask-Mail assertion)
        raise RuntimeError(
            "MAIL_DEFAULT_SENDER is not configured. Set MAIL_DEFAULT_SENDER in .env"
        )

    msg = Message(subject=subject, recipients=[to_email], body=body, sender=sender)
    mail.send(msg)
