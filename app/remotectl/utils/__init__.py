"""Utility modules for remotectl.

This module exports commonly used utility functions.
"""

from remotectl.utils.formatting import (
    console,
    create_remote_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from remotectl.utils.shell import CommandResult, DetachedProcess, ProcessRunner, command_exists

__all__ = [
    "CommandResult",
    "DetachedProcess",
    "ProcessRunner",
    "command_exists",
    "console",
    "create_remote_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
