"""Domain endpoints — forwarded to ACE's domain management API.

The attribute lookup matches any two segments under /domains, so this
router must be included after the pseudonym router.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Response

from acelink.deps import NOT_BLANK, get_domains
from acelink.domains import DomainConnector
from acelink.models import DomainRecord

router = APIRouter(prefix="/api/pseudonymization", tags=["domains"])


def _out(domain: DomainRecord | None):
    return domain.to_wire() if domain is not None else None


@router.get("/domain/hierarchy")
def domain_hierarchy(connector: DomainConnector = Depends(get_domains)):
    return [d.to_wire() for d in connector.get_all_domains()]


@router.get("/domain")
def get_domain(
    name: str = Query(..., pattern=NOT_BLANK),
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.get_domain(name))


@router.post("/domain")
def create_domain(
    domain: DomainRecord,
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.create_domain(domain))


@router.post("/domain/complete")
def create_domain_complete(
    domain: DomainRecord,
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.create_domain_complete(domain))


@router.put("/domain")
def update_domain(
    domain: DomainRecord,
    name: str = Query(..., pattern=NOT_BLANK),
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.update_domain(name, domain))


@router.put("/domain/complete/{domain_name}")
def update_domain_complete(
    domain: DomainRecord,
    domain_name: str = Path(..., pattern=NOT_BLANK),
    recursive: bool = True,
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.update_domain_complete(domain_name, domain, recursive))


@router.delete("/domain/{domain_name}", status_code=204)
def delete_domain(
    domain_name: str = Path(..., pattern=NOT_BLANK),
    recursive: bool = True,
    connector: DomainConnector = Depends(get_domains),
):
    connector.delete_domain(domain_name, recursive)
    return Response(status_code=204)


@router.put("/domains/{domain_name}/salt")
def update_salt(
    domain_name: str = Path(..., pattern=NOT_BLANK),
    new_salt: str = Query(..., alias="new-salt", pattern=NOT_BLANK),
    allow_empty: bool = Query(False, alias="allowEmpty"),
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.update_salt(domain_name, new_salt, allow_empty))


@router.get("/domains/{domain_name}/{attribute}")
def get_domain_attribute(
    domain_name: str = Path(..., pattern=NOT_BLANK),
    attribute: str = Path(..., pattern=NOT_BLANK),
    connector: DomainConnector = Depends(get_domains),
):
    return _out(connector.get_domain_attribute(domain_name, attribute))
