from typing import Any, Dict, List, Optional


class StockEngineError(Exception):
    """Base class for every error the stock engine reports to its caller."""
    code = "stock_engine_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InsufficientStock(StockEngineError):
    """A decrement would take an item's quantity below zero."""
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, item_id: Any, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for item {item_id}. Requested: {requested}, Available: {available}",
            details={"item_id": str(item_id), "requested": requested, "available": available},
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class ValidationError(StockEngineError):
    code = "validation_error"
    status_code = 400


class InvalidState(StockEngineError):
    code = "invalid_state"
    status_code = 409


class NotFound(StockEngineError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found.", details={"entity": entity, "id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class PartialFailure(StockEngineError):
    """
    A step failed after an earlier step had already committed outside the
    database transaction. Nothing is rolled back automatically: `completed_steps`
    and `results` tell the operator what is left over and needs correcting.
    """
    code = "partial_failure"
    status_code = 500

    def __init__(
        self,
        operation: str,
        step: str,
        completed_steps: List[str],
        results: Dict[str, Any],
        cause: BaseException,
    ):
        message = (
            f"{operation} failed at step '{step}' after {', '.join(completed_steps)} "
            f"had already been committed: {cause!r}"
        )
        super().__init__(
            message,
            details={
                "operation": operation,
                "failed_step": step,
                "completed_steps": completed_steps,
                "results": {name: str(value) for name, value in results.items()},
            },
        )
        self.operation = operation
        self.step = step
        self.completed_steps = completed_steps
        self.results = results
        self.cause = cause
