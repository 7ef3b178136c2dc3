"""Plugin descriptor models.

A plugin describes one backend type (e.g. Google Drive, SFTP) and the
fields a user fills in to configure a remote of that type. Descriptors
are read from ``<plugin_dir>/<name>/config.json``.
"""

from enum import Enum
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class FieldType(str, Enum):
    """Input kinds a plugin field can declare."""

    TEXT = "text"
    PASSWORD = "password"
    CHECKBOX = "checkbox"
    FILE = "file"
    NUMBER = "number"


class FieldSpec(BaseModel):
    """A single configurable field of a plugin.

    Attributes:
        name: Key written to rclone.conf.
        display_name: Label shown to the user.
        field_type: Input kind; accepts the JSON key "field_type" or "type".
        required: Whether a value must be supplied.
        default: Suggested value, always stored as a string.
        placeholder: Hint text for empty inputs.
        tooltip: Longer help text.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: Annotated[str, Field(min_length=1, description="Config key")]
    display_name: Annotated[str, Field(description="Label")] = ""
    field_type: Annotated[
        FieldType,
        Field(
            validation_alias=AliasChoices("field_type", "type"),
            description="Input kind",
        ),
    ] = FieldType.TEXT
    required: bool = False
    default: str = ""
    placeholder: str = ""
    tooltip: str = ""

    @field_validator("field_type", mode="before")
    @classmethod
    def normalize_field_type(cls, v: object) -> object:
        """Accept field types in any letter case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("default", mode="before")
    @classmethod
    def stringify_default(cls, v: object) -> str:
        """Store JSON booleans and numbers the way rclone.conf spells them."""
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        return str(v)

    @property
    def label(self) -> str:
        """Display name, falling back to the key."""
        return self.display_name or self.name

    @property
    def is_secret(self) -> bool:
        """Check if values of this field must be obscured."""
        return self.field_type == FieldType.PASSWORD


class PluginDescriptor(BaseModel):
    """Schema for configuring remotes of one backend type.

    Attributes:
        name: Backend identifier, written as the remote's ``type``.
        display_name: Human-friendly backend name.
        description: Short description of the backend.
        version: Descriptor version.
        author: Descriptor author.
        secure: Whether the backend stores credentials.
        basic_fields: Fields shown by default.
        advanced_fields: Optional fields shown on request.
    """

    model_config = ConfigDict(extra="ignore")

    name: Annotated[str, Field(min_length=1, description="Backend identifier")]
    display_name: str = ""
    description: str = ""
    version: str = ""
    author: str = ""
    secure: bool = False
    basic_fields: list[FieldSpec] = []
    advanced_fields: list[FieldSpec] = []

    @model_validator(mode="before")
    @classmethod
    def fold_legacy_fields(cls, data: Any) -> Any:
        """Map the legacy flat ``fields`` list onto ``basic_fields``."""
        if isinstance(data, dict) and "fields" in data:
            data = dict(data)
            legacy = data.pop("fields") or []
            if not data.get("basic_fields"):
                data["basic_fields"] = legacy
        return data

    @property
    def label(self) -> str:
        """Display name, falling back to the identifier."""
        return self.display_name or self.name

    @property
    def all_fields(self) -> list[FieldSpec]:
        """Basic fields followed by advanced fields."""
        return [*self.basic_fields, *self.advanced_fields]

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a field by key."""
        for spec in self.all_fields:
            if spec.name == name:
                return spec
        return None

    def matches(self, remote_type: str) -> bool:
        """Check if this plugin describes a remote type (case-insensitive)."""
        return self.name.lower() == remote_type.lower()
