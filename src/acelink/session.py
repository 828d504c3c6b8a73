"""Authenticated calls to the ACE REST API.

One call = one send, plus one resend if ACE answers 401 after the token
has been refreshed. Anything else that goes wrong becomes an
UpstreamError naming the action that failed.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from acelink.errors import UpstreamError
from acelink.models import AceModel
from acelink.tokens import KeycloakTokenProvider

logger = logging.getLogger("acelink.session")

API_ROOT = "api/pseudonymization"

M = TypeVar("M", bound=BaseModel)


def segment(value: str) -> str:
    """Quote a value for use as a single path segment."""
    return quote(value, safe="")


def wire(body: Any) -> Any:
    """Turn a model, or a list of models, into JSON-ready data."""
    if isinstance(body, AceModel):
        return body.to_wire()
    if isinstance(body, (list, tuple)):
        return [wire(item) for item in body]
    return body


class AceSession:
    def __init__(
        self,
        client: httpx.Client,
        service_url: str,
        tokens: KeycloakTokenProvider,
    ):
        self._client = client
        self.base_url = f"{service_url.rstrip('/')}/{API_ROOT}/"
        self._tokens = tokens

    def call(
        self,
        method: str,
        path: str,
        *,
        action: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> httpx.Response:
        url = self.base_url + path
        query = {k: v for k, v in (params or {}).items() if v is not None}
        payload = wire(body)

        try:
            token = self._tokens.token()
            response = self._send(method, url, token, query, payload)
            if response.status_code == 401:
                logger.info("ACE rejected token on %s %s, refreshing", method, path)
                token = self._tokens.refresh(rejected=token)
                response = self._send(method, url, token, query, payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Failed to %s: ACE answered %d", action, status)
            raise UpstreamError(
                f"Failed to {action}: {status} {_reason(exc.response)}",
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Failed to %s: %s", action, exc)
            raise UpstreamError(f"Failed to {action}: {exc}") from exc
        return response

    def _send(
        self, method: str, url: str, token: str, params: dict[str, Any], payload: Any
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if payload is None:
            return self._client.request(method, url, params=params, headers=headers)
        return self._client.request(
            method, url, params=params, headers=headers, json=payload
        )


def _reason(response: httpx.Response) -> str:
    text = response.text.strip()
    return text[:200] if text else response.reason_phrase


def parse_body(response: httpx.Response, action: str) -> Any:
    """Decoded JSON body, or None when the body is empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"Failed to {action}: response is not JSON") from exc


def as_list(data: Any) -> list:
    """ACE answers some calls with a single object and some with an array."""
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


def to_models(model: type[M], items: Iterable[Any], action: str) -> list[M]:
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as exc:
        raise UpstreamError(f"Failed to {action}: unexpected response: {exc}") from exc


def to_model(model: type[M], data: Any, action: str) -> M | None:
    if data is None:
        return None
    return to_models(model, [data], action)[0]
