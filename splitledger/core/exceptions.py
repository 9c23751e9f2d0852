from fastapi import HTTPException


class LedgerError(HTTPException):
    """
    Base for every error the ledger raises.

    Services raise these directly, FastAPI turns them into responses
    with the class status code.
    """

    status_code = 400
    default_detail = "Ledger operation failed"

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
        )


class SplitMismatch(LedgerError):
    status_code = 400
    default_detail = "Split amounts must equal transaction amount"


class InvalidAmount(LedgerError):
    status_code = 400
    default_detail = "Amount must be positive"


class NotFound(LedgerError):
    status_code = 404
    default_detail = "Not found"


class NoOp(LedgerError):
    status_code = 409
    default_detail = "Nothing to settle"


AlreadySettled = NoOp


class MemberHasBalance(LedgerError):
    status_code = 409
    default_detail = "Member still has an outstanding balance"


class ConcurrencyConflict(LedgerError):
    status_code = 409
    default_detail = "Concurrent update detected, retry the request"


class PersistenceFailure(LedgerError):
    status_code = 503
    default_detail = "Could not persist ledger changes"
