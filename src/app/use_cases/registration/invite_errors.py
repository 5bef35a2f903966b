from src.libs.result import Error
from src.app.repositories.invite_code_repository import ClaimOutcome

INVALID_INVITE_CODE = Error("INVALID_INVITE_CODE", "Invalid invite code.")
INVITE_CODE_ALREADY_USED = Error(
    "INVITE_CODE_ALREADY_USED", "This invite code has already been used."
)
INVITE_CODE_REVOKED = Error("INVITE_CODE_REVOKED", "This invite code has been revoked.")

CLAIM_ERRORS = {
    ClaimOutcome.not_found: INVALID_INVITE_CODE,
    ClaimOutcome.already_consumed: INVITE_CODE_ALREADY_USED,
    ClaimOutcome.revoked: INVITE_CODE_REVOKED,
}

INVITE_ERROR_CODES = frozenset(error.code for error in CLAIM_ERRORS.values())
