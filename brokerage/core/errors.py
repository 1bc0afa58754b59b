from typing import Any, Optional


class BrokerageError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(BrokerageError):
    status_code = 422
    message = "Invalid request data"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None, details: Any = None):
        if field and details is None:
            details = {"field": field}
        super().__init__(message, details=details)
        self.field = field


class NotFoundError(BrokerageError):
    status_code = 404
    message = "Not found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found", details={"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(BrokerageError):
    status_code = 409
    message = "Conflict"


class OfferConflictError(ConflictError):
    message = "You already have an offer for this lot. Please contact the broker to revise it."

    def __init__(self, lot_id: int, buyer_id: int):
        super().__init__(details={"lot_id": lot_id, "buyer_id": buyer_id, "constraint": "uq_offers_lot_buyer"})
        self.lot_id = lot_id
        self.buyer_id = buyer_id


def is_unique_violation(exc: Exception) -> bool:
    """Отличает нарушение уникальности (23505) от прочих ошибок целостности."""
    orig = getattr(exc, "orig", exc)
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == "23505":
            return True
    message = str(orig).lower()
    return "unique" in message or "duplicate" in message
