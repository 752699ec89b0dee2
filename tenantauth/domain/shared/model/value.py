from pydantic import BaseModel, ConfigDict


class ValueObject(BaseModel):
    """Immutable, hashable value compared by its fields."""

    model_config = ConfigDict(frozen=True)
