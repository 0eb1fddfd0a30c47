"""Base model for all data models in the time logging assistant.

This module provides a base Pydantic model with common configuration
shared by entries, conversation state and wire payloads.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking on assignment
    - Serialization to/from dictionaries and JSON
    - Rejection of unknown fields

    Example:
        >>> class Note(BaseDataModel):
        ...     text: str
        >>> Note(text="hello").model_dump()
        {'text': 'hello'}
    """

    model_config = ConfigDict(
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Unknown fields indicate a payload/schema mismatch
        extra="forbid",
        frozen=False,
        use_enum_values=False,
    )
