"""Base Pydantic schemas with strict validation."""
from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Base model that forbids extra fields.

    Request models handed to the engine should inherit from this class
    so that misspelled fields fail loudly instead of being dropped.

    Usage:
        class MyRequest(StrictBaseModel):
            field: str

    When to use BaseModel instead:
        - Settings/config models that need extra="ignore" for env vars
        - Records produced by external layers that may carry extra fields
    """

    model_config = ConfigDict(extra="forbid")
