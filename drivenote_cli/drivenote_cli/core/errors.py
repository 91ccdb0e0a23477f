"""Exceptions raised by the OneDrive helpers."""

from __future__ import annotations

from typing import Optional


class DriveError(Exception):
    """Base class for errors reported to the user."""


class AuthError(DriveError):
    """The token endpoint rejected a code or refresh token."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ApiError(DriveError):
    """Any other non-2xx response from the Graph drive API."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotFoundError(ApiError):
    pass


class DecodeError(DriveError):
    """Response body could not be understood."""
