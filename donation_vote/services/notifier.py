import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Tuple

from ..utils.mailer import render_placeholders, send_email

logger = logging.getLogger(__name__)

VOTING_LINK = "voting_link"
VOTE_CONFIRMATION = "vote_confirmation"
VOTE_SUBMITTED = "vote_submitted"


@dataclass(frozen=True)
class NotificationSettings:
    """Mail templates plus operator routing, resolved once from app config."""

    templates: Mapping[str, Tuple[str, str]]
    operator_enabled: bool = False
    operator_recipient: str = ""

    @classmethod
    def from_config(cls, config: Mapping) -> "NotificationSettings":
        return cls(
            templates={
                VOTING_LINK: (config["LINK_EMAIL_SUBJECT"], config["LINK_EMAIL_BODY"]),
                VOTE_CONFIRMATION: (config["CONFIRM_EMAIL_SUBJECT"], config["CONFIRM_EMAIL_BODY"]),
                VOTE_SUBMITTED: (config["NOTIFICATION_EMAIL_SUBJECT"], config["NOTIFICATION_EMAIL_BODY"]),
            },
            operator_enabled=bool(config.get("NOTIFICATION_EMAIL_ENABLED")),
            # Falls back to the mail sender, the closest thing we have to an admin inbox
            operator_recipient=config.get("NOTIFICATION_EMAIL_RECIPIENT") or config.get("MAIL_DEFAULT_SENDER") or "",
        )


class MailNotifier:
    """
    Renders a template kind and hands it to a send(to, subject, body) transport.
    """

    def __init__(self, settings: NotificationSettings, send: Callable[[str, str, str], None] = send_email):
        self.settings = settings
        self.send = send

    def _render(self, template_kind: str, data: Dict) -> Tuple[str, str]:
        subject, body = self.settings.templates[template_kind]
        return render_placeholders(subject, data), render_placeholders(body, data)

    def notify(self, identity: str, template_kind: str, data: Dict) -> None:
        subject, body = self._render(template_kind, data)
        self.send(identity, subject, body)

    def notify_operator(self, template_kind: str, data: Dict) -> None:
        if not self.settings.operator_enabled:
            return
        if not self.settings.operator_recipient:
            logger.warning("Operator notification enabled but no recipient configured")
            return
        subject, body = self._render(template_kind, data)
        self.send(self.settings.operator_recipient, subject, body)
