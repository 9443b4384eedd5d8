"""Strict pydantic base shared by error, validation and provider models.

Task records and request payloads declare their own looser frozen config
next to the model, since they are built from collaborator data.
"""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Frozen model that rejects unknown fields and does no type coercion."""

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        frozen=True,
        validate_default=True,
        use_enum_values=False,
    )
