"""
Error taxonomy shared by the stores, the adapters and the HTTP layer.

Each error carries the status code the API answers with. UpstreamError is
the exception: it never reaches a client, adapters turn it into a fallback
payload.
"""

from __future__ import annotations


class DashboardError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    status_code = 400


class AuthError(DashboardError):
    status_code = 401


class ConflictError(DashboardError):
    # Duplicate registration is a plain 400 for existing clients
    status_code = 400


class StoreError(DashboardError):
    status_code = 500


class UpstreamError(DashboardError):
    status_code = 502

    def __init__(self, feed: str, message: str):
        super().__init__(f"{feed}: {message}")
        self.feed = feed
        self.reason = message
