"""
Per-request wiring of the token core from the Flask app.

The core classes take their collaborators and settings explicitly; this is
the only module that reads them off `current_app`. Tests (or a deployment)
can swap the notifier or target resolver through `app.extensions`.
"""
from datetime import timedelta

from flask import current_app

from ..extensions import db
from .consumption import VoteConsumption
from .gate import Gate
from .issuer import TokenIssuer
from .ledger import SubmissionLedger
from .notifier import MailNotifier, NotificationSettings
from .targets import SqlTargetResolver
from .token_store import TokenStore
from .validator import TokenValidator

NOTIFIER_KEY = "donation_vote.notifier"
RESOLVER_KEY = "donation_vote.target_resolver"


def token_store() -> TokenStore:
    return TokenStore(db.session, current_app.config["SECRET_KEY"])


def default_expiry_window() -> timedelta:
    return timedelta(hours=current_app.config["TOKEN_EXPIRY_HOURS"])


def notifier():
    custom = current_app.extensions.get(NOTIFIER_KEY)
    if custom is not None:
        return custom
    return MailNotifier(NotificationSettings.from_config(current_app.config))


def target_resolver():
    custom = current_app.extensions.get(RESOLVER_KEY)
    if custom is not None:
        return custom
    return SqlTargetResolver(db.session)


def token_issuer() -> TokenIssuer:
    return TokenIssuer(token_store(), max_attempts=current_app.config["TOKEN_ISSUE_MAX_ATTEMPTS"])


def token_validator() -> TokenValidator:
    return TokenValidator(token_store())


def vote_consumption() -> VoteConsumption:
    store = token_store()
    return VoteConsumption(
        store=store,
        validator=TokenValidator(store),
        resolver=target_resolver(),
        notifier=notifier(),
    )


def gate() -> Gate:
    return Gate(
        token_validator(),
        protected_resources=current_app.config.get("PROTECTED_RESOURCES", ()),
        hide=current_app.config.get("HIDE_PROTECTED_RESOURCES", True),
    )


def submission_ledger() -> SubmissionLedger:
    return SubmissionLedger(db.session)
