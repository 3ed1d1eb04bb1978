class PayFamError(Exception):
    """Base class for errors raised by the dues ledger."""
    status_code = 400


class ValidationError(PayFamError):
    """Malformed input, rejected before anything is written."""
    status_code = 400


class NotFoundError(PayFamError):
    """A referenced member, due or transaction does not exist."""
    status_code = 404


class ConstraintViolation(PayFamError):
    """A uniqueness conflict that could not be resolved by re-fetching."""
    status_code = 409


class StorageUnavailable(PayFamError):
    """The database could not be reached; the caller may retry."""
    status_code = 503
