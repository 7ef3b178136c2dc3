"""Data models for remotectl.

This module exports the core data structures used throughout the application.
"""

from remotectl.models.plugin import FieldSpec, FieldType, PluginDescriptor
from remotectl.models.remote import MountState, RemoteDefinition, RemoteSummary
from remotectl.models.result import ErrorKind, OperationResult

__all__ = [
    "ErrorKind",
    "FieldSpec",
    "FieldType",
    "MountState",
    "OperationResult",
    "PluginDescriptor",
    "RemoteDefinition",
    "RemoteSummary",
]
