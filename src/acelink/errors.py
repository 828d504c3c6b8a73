"""Errors raised by the connector layer.

Every failure talking to ACE or the identity provider surfaces as a
ConnectorError subclass. The app maps each class to an HTTP status.
"""

from __future__ import annotations


class ConnectorError(Exception):
    """Generic connector failure."""


class ConfigError(ConnectorError):
    """Required connection settings are missing."""


class TokenError(ConnectorError):
    """The identity provider refused to issue a token or was unreachable."""


class SelectorError(ConnectorError):
    """A request did not say which pseudonym record it targets."""


class UpstreamError(ConnectorError):
    """An ACE call failed.

    status_code is the upstream HTTP status, or None when no response
    arrived (connection refused, timeout, unparseable body).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
