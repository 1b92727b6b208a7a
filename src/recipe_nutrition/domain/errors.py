"""Error types raised by the core."""


class RecipeNutritionError(Exception):
    """Base class for core errors."""


class NotFoundError(RecipeNutritionError):
    """A referenced recipe, food or ingredient does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(RecipeNutritionError):
    """Malformed input rejected before any persistence."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []
