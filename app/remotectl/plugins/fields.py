"""Validation of submitted remote field values.

These are pure functions over ``(FieldSpec, submitted, existing)``: they
decide what value ends up in rclone.conf without touching the file or
running rclone.
"""

from dataclasses import dataclass, field

from remotectl.core.errors import FieldValidationError
from remotectl.models.plugin import FieldSpec, FieldType, PluginDescriptor

# Key carrying the section name in submitted values
REMOTE_NAME_FIELD = "remote_name"

_BOOLEAN_VALUES = ("true", "false")

# Characters that would end a "key = value" line early
_LINE_BREAKS = ("\n", "\r")


def check_property(key: str, value: str) -> None:
    """Check a key/value pair fits on one rclone.conf line.

    Raises:
        FieldValidationError: If the key or value would add lines or
            sections to the file, or the key would not read back as a key.
    """
    if (
        not key.strip()
        or key != key.strip()
        or "=" in key
        or key.startswith(("[", "#", ";"))
        or any(c in key for c in _LINE_BREAKS)
    ):
        raise FieldValidationError(f"Invalid field name '{key}'")
    if any(c in value for c in _LINE_BREAKS):
        raise FieldValidationError(f"Field '{key}' must not contain line breaks")


def resolve_field(spec: FieldSpec, submitted: str | None, existing: str | None = None) -> str | None:
    """Decide the value stored for one field.

    An empty password during an edit keeps the stored value, so users don't
    have to retype secrets they can't see.

    Args:
        spec: Field schema.
        submitted: Value the user entered, None if the field was not sent.
        existing: Value currently stored, None when adding a remote.

    Returns:
        Value to store, or None to leave the field out.

    Raises:
        FieldValidationError: If a required field is empty or a value has
            the wrong shape for its type.
    """
    value = submitted
    if value is not None and spec.field_type != FieldType.PASSWORD:
        value = value.strip()

    if not value:
        if spec.field_type == FieldType.PASSWORD and existing:
            return existing
        if spec.required:
            raise FieldValidationError(f"Required field '{spec.name}' is missing")
        return None

    check_property(spec.name, value)

    if spec.field_type == FieldType.CHECKBOX:
        value = value.lower()
        if value not in _BOOLEAN_VALUES:
            raise FieldValidationError(f"Field '{spec.name}' must be true or false")
    elif spec.field_type == FieldType.NUMBER:
        try:
            float(value)
        except ValueError:
            raise FieldValidationError(f"Field '{spec.name}' must be a number") from None

    return value


@dataclass(slots=True)
class ResolvedFields:
    """Outcome of resolving a full submission against a plugin.

    Attributes:
        values: Key/value pairs to store, in plugin field order followed by
            extra submitted keys.
        new_secrets: Keys whose values are newly entered secrets that still
            need obscuring.
    """

    values: dict[str, str] = field(default_factory=dict)
    new_secrets: set[str] = field(default_factory=set)


def resolve_fields(
    plugin: PluginDescriptor,
    submitted: dict[str, str],
    existing: dict[str, str] | None = None,
) -> ResolvedFields:
    """Resolve every field of a submission.

    Keys the plugin doesn't declare pass through unchanged. The
    ``remote_name`` and ``type`` keys are never stored as properties. When
    adding a remote, fields that were not sent take their default.

    Args:
        plugin: Schema to validate against.
        submitted: Values the user entered.
        existing: Properties currently stored, None when adding a remote.

    Returns:
        ResolvedFields with values to store and secrets to obscure.

    Raises:
        FieldValidationError: On the first invalid field.
    """
    adding = existing is None
    existing = existing or {}
    resolved = ResolvedFields()

    for spec in plugin.all_fields:
        if spec.name in (REMOTE_NAME_FIELD, "type"):
            continue
        submitted_value = submitted.get(spec.name)
        if adding and submitted_value is None and spec.default:
            submitted_value = spec.default
        value = resolve_field(spec, submitted_value, existing.get(spec.name))
        if value is None:
            continue
        resolved.values[spec.name] = value
        if spec.is_secret and value != existing.get(spec.name):
            resolved.new_secrets.add(spec.name)

    for key, value in submitted.items():
        if key in (REMOTE_NAME_FIELD, "type") or plugin.get_field(key) is not None:
            continue
        if value != "":
            check_property(key, value)
            resolved.values[key] = value

    return resolved
