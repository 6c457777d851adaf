"""Error taxonomy shared by the ledger writes and the reporting layer.

Every error derives from ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""


class InvalidRange(ValueError):
    """Raised for a malformed date or an end date earlier than the start date."""


class InvalidFilter(ValueError):
    """Raised for malformed identifiers or unknown status/metric/grouping values."""


class NotFoundError(ValueError):
    def __init__(self, entity: str, entity_id: str | None = None):
        message = f"{entity} with id {entity_id} not found." if entity_id else f"{entity} not found."
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ValueError):
    """Raised when a write would violate a ledger invariant such as one payout per item."""
