from dataclasses import dataclass
from typing import Iterable, Optional

from ..models.vote_token import VoteToken
from .validator import TokenValidator

# Same answer for unknown, expired and used tokens so callers can't tell them apart.
UNAVAILABLE_MESSAGE = "This link is no longer available."


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    resource: str
    gated: bool = True
    token: Optional[VoteToken] = None
    message: str = ""


class Gate:
    """
    Decides whether a resource may be shown to a request carrying `secret`.

    Only resources listed in `protected_resources` need a live token, and only
    while `hide` is on. Everything else is allowed without a token lookup.
    """

    def __init__(self, validator: TokenValidator, protected_resources: Iterable[str] = (), hide: bool = True):
        self.validator = validator
        self.protected_resources = frozenset(protected_resources)
        self.hide = hide

    def is_protected(self, resource: str) -> bool:
        return self.hide and resource in self.protected_resources

    def decide(self, secret: str | None, resource: str) -> GateDecision:
        if not self.is_protected(resource):
            return GateDecision(allowed=True, resource=resource, gated=False)

        check = self.validator.check(secret)
        if check.is_active:
            return GateDecision(allowed=True, resource=resource, token=check.token)
        return GateDecision(allowed=False, resource=resource, message=UNAVAILABLE_MESSAGE)
