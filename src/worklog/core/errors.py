# src/worklog/core/errors.py

"""
Error taxonomy shared by the store, the task operations and the command layer.

- NotFound: task is missing or not owned by the requester
- InvalidInput: status/minutes/field outside the allowed domain
- StorageFailure: the backing SQLite store raised
- LLMUnavailable: the chat completion provider failed
"""

from __future__ import annotations


class WorklogError(Exception):
    """Base class for all errors raised by worklog operations."""


class NotFound(WorklogError, LookupError):
    pass


class InvalidInput(WorklogError, ValueError):
    pass


class StorageFailure(WorklogError, RuntimeError):
    pass


class LLMUnavailable(WorklogError, RuntimeError):
    """The chat completion provider failed or returned nothing."""
