"""Configuration models for tagloop state.

The runtime declares its named storages once at startup. These models
accept plain dicts (e.g. loaded from YAML or JSON) and validate them.
"""

from pydantic import BaseModel, Field, field_validator

from tagloop.state.models import StorageType


class StorageConfig(BaseModel):
    """Declaration of a single named storage slot."""

    name: str = Field(description="Storage name, also used as its tag name")
    type: StorageType = Field(description="Access discipline of the storage")
    verbose: bool = Field(
        default=False,
        description="Echo mutations of this storage to the console"
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("storage name must not be blank")
        return value


class StateConfig(BaseModel):
    """Declaration of all storages owned by a State."""

    storages: list[StorageConfig] = Field(
        default_factory=list,
        description="Storages to create, in rendering order"
    )
    verbose: bool = Field(
        default=False,
        description="Echo mutations of every storage to the console"
    )

    @field_validator("storages")
    @classmethod
    def _unique_names(cls, value: list[StorageConfig]) -> list[StorageConfig]:
        seen = set()
        for storage in value:
            if storage.name in seen:
                raise ValueError(f"duplicate storage name '{storage.name}'")
            seen.add(storage.name)
        return value
