"""
Domain errors raised by the token core.

Routes translate these into HTTP responses; nothing here is fatal to the
process, every error is scoped to the request that raised it.
"""


class DonationVoteError(Exception):
    code = "DONATION_VOTE_ERROR"
    message = "Request failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class IssuanceError(DonationVoteError):
    code = "ISSUANCE_FAILED"
    message = "Could not issue a voting token"


class StorageError(DonationVoteError):
    code = "STORAGE_ERROR"
    message = "Storage is temporarily unavailable"


class ConsumeError(DonationVoteError):
    code = "CONSUME_FAILED"


class InvalidToken(ConsumeError):
    code = "INVALID_TOKEN"

    # Client-facing wording per failure kind.
    MESSAGES = {
        "UNKNOWN": "Invalid token.",
        "EXPIRED": "This link has expired.",
        "USED": "This link has already been used.",
    }

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(self.MESSAGES.get(reason, "Invalid token."))


class InvalidTarget(ConsumeError):
    code = "INVALID_TARGET"
    message = "Invalid platform."


class AlreadyUsed(ConsumeError):
    code = "ALREADY_USED"
    message = "This link has already been used."
