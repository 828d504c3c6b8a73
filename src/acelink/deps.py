"""FastAPI dependencies for acelink routes."""

from __future__ import annotations

from fastapi import Request

from acelink.domains import DomainConnector
from acelink.pseudonyms import PseudonymConnector


def get_domains(request: Request) -> DomainConnector:
    return request.app.state.domains


def get_pseudonyms(request: Request) -> PseudonymConnector:
    return request.app.state.pseudonyms


# Query and path values must contain at least one non-whitespace character.
NOT_BLANK = r"\S"
