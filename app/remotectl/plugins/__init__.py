"""Backend plugin descriptors and field validation."""

from remotectl.plugins.fields import (
    REMOTE_NAME_FIELD,
    ResolvedFields,
    check_property,
    resolve_field,
    resolve_fields,
)
from remotectl.plugins.registry import PluginRegistry, load_descriptor

__all__ = [
    "REMOTE_NAME_FIELD",
    "PluginRegistry",
    "ResolvedFields",
    "check_property",
    "load_descriptor",
    "resolve_field",
    "resolve_fields",
]
