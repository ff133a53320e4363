"""Type definitions for tagloop.

This module defines the Invocation model produced by the parser and the
Action capability that external action catalogues implement so their
call syntax can be rendered for the model.
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# =============================================================================
# Invocation Types
# =============================================================================

class Invocation(BaseModel):
    """A single action call detected in model output.

    The action name is not validated against any catalogue; the dispatcher
    that receives the invocation decides what it means. Attributes are
    held in a read-only mapping, so a built invocation cannot be changed.
    """

    model_config = ConfigDict(frozen=True)

    action: str = Field(description="Name of the invoked action (the tag name)")
    attributes: Optional[Mapping[str, str]] = Field(
        default=None,
        description="Attributes of the opening tag, if any"
    )
    payload: Optional[str] = Field(
        default=None,
        description="Trimmed body of the tag, if any"
    )

    @field_validator("attributes")
    @classmethod
    def _freeze_attributes(
        cls, value: Optional[Mapping[str, str]]
    ) -> Optional[Mapping[str, str]]:
        if not value:
            return None
        return MappingProxyType(dict(value))

    @field_serializer("attributes")
    def _attributes_as_dict(
        self, value: Optional[Mapping[str, str]]
    ) -> Optional[dict[str, str]]:
        return dict(value) if value is not None else None


# =============================================================================
# Action Capability
# =============================================================================

class Action(ABC):
    """Description of one invocable action, used to document call syntax.

    Subclass this in the action catalogue. Only these three accessors are
    consumed here; execution lives with the dispatcher.
    """

    @abstractmethod
    def name(self) -> str:
        """Tag name the model must use to invoke this action."""

    def attributes(self) -> Optional[dict[str, str]]:
        """Example attributes, mapping attribute name to example value."""
        return None

    def example_payload(self) -> Optional[str]:
        """Example tag body."""
        return None
