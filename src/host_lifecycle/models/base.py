"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict


class LifecycleBaseModel(BaseModel):
    """Base model with common configuration.

    Conventions:
    - Python attributes are snake_case; Teletraan's camelCase names are aliases
    - Enum fields hold their string values
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )
