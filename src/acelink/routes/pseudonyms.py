"""Pseudonym endpoints — forwarded to ACE's pseudonymization API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Response
from fastapi.responses import PlainTextResponse

from acelink.deps import NOT_BLANK, get_pseudonyms
from acelink.models import PseudonymRecord
from acelink.pseudonyms import PseudonymConnector

router = APIRouter(prefix="/api/pseudonymization", tags=["pseudonyms"])


def _out(records: list[PseudonymRecord]):
    return [r.to_wire() for r in records]


def _one(record: PseudonymRecord | None):
    return record.to_wire() if record is not None else None


# ── Create ────────────────────────────────────────────────────


@router.post("/domains/{domain}/pseudonyms", status_code=201)
def create_pseudonym_batch(
    records: list[PseudonymRecord],
    domain: str = Path(..., pattern=NOT_BLANK),
    omit_prefix: bool = Query(False, alias="omitPrefix"),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(connector.create_pseudonym_batch(domain, records, omit_prefix))


@router.post("/domains/{domain}/pseudonym", status_code=201)
def create_pseudonym(
    record: PseudonymRecord,
    domain: str = Path(..., pattern=NOT_BLANK),
    omit_prefix: bool = Query(False, alias="omitPrefix"),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(connector.create_pseudonym(domain, record, omit_prefix))


# ── Read ──────────────────────────────────────────────────────


@router.get("/domains/linked-pseudonyms")
def linked_pseudonyms(
    source_domain: str = Query(..., alias="sourceDomain", pattern=NOT_BLANK),
    target_domain: str = Query(..., alias="targetDomain", pattern=NOT_BLANK),
    source_identifier: str | None = Query(None, alias="sourceIdentifier"),
    source_id_type: str | None = Query(None, alias="sourceIdType"),
    source_psn: str | None = Query(None, alias="sourcePsn"),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(
        connector.get_linked_pseudonyms(
            source_domain, target_domain, source_identifier, source_id_type, source_psn
        )
    )


@router.get("/domains/{domain}/pseudonyms")
def get_pseudonym_batch(
    domain: str = Path(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(connector.get_pseudonym_batch(domain))


@router.get("/domains/{domain}/pseudonym/by-id")
def get_pseudonym_by_identifier(
    domain: str = Path(..., pattern=NOT_BLANK),
    identifier: str = Query(..., alias="id", pattern=NOT_BLANK),
    id_type: str = Query(..., alias="idType", pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(connector.get_pseudonym_by_identifier(domain, identifier, id_type))


@router.get("/domains/{domain}/pseudonym/by-psn")
def get_pseudonym_by_psn(
    domain: str = Path(..., pattern=NOT_BLANK),
    psn: str = Query(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _out(connector.get_pseudonym_by_psn(domain, psn))


@router.get("/domains/{domain}/pseudonym/validation")
def validate_pseudonym(
    domain: str = Path(..., pattern=NOT_BLANK),
    psn: str = Query(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    verdict = connector.validate_pseudonym(domain, psn)
    if isinstance(verdict, str):
        return PlainTextResponse(verdict)
    return verdict


# ── Update ────────────────────────────────────────────────────


@router.put("/domains/{domain}/pseudonyms")
def update_pseudonym_batch(
    records: list[PseudonymRecord],
    domain: str = Path(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    connector.update_pseudonym_batch(domain, records)
    return Response(status_code=200)


@router.put("/domains/{domain}/pseudonym/by-id")
def update_pseudonym_by_identifier(
    record: PseudonymRecord,
    domain: str = Path(..., pattern=NOT_BLANK),
    identifier: str = Query(..., alias="id", pattern=NOT_BLANK),
    id_type: str = Query(..., alias="idType", pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _one(
        connector.update_pseudonym_by_identifier(domain, identifier, id_type, record)
    )


@router.put("/domains/{domain}/pseudonym/by-psn")
def update_pseudonym_by_psn(
    record: PseudonymRecord,
    domain: str = Path(..., pattern=NOT_BLANK),
    psn: str = Query(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _one(connector.update_pseudonym_by_psn(domain, psn, record))


@router.put("/domains/{domain}/pseudonym/complete/by-id")
def update_pseudonym_complete_by_identifier(
    record: PseudonymRecord,
    domain: str = Path(..., pattern=NOT_BLANK),
    identifier: str = Query(..., alias="id", pattern=NOT_BLANK),
    id_type: str = Query(..., alias="idType", pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _one(
        connector.update_pseudonym_complete_by_identifier(
            domain, record, identifier, id_type
        )
    )


@router.put("/domains/{domain}/pseudonym/complete/by-psn")
def update_pseudonym_complete_by_psn(
    record: PseudonymRecord,
    domain: str = Path(..., pattern=NOT_BLANK),
    psn: str = Query(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    return _one(connector.update_pseudonym_complete_by_psn(domain, record, psn))


# ── Delete ────────────────────────────────────────────────────


@router.delete("/domains/{domain}/pseudonyms", status_code=204)
def delete_pseudonym_batch(
    domain: str = Path(..., pattern=NOT_BLANK),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    connector.delete_pseudonym_batch(domain)
    return Response(status_code=204)


@router.delete("/domains/{domain}/pseudonym", status_code=204)
def delete_pseudonym(
    domain: str = Path(..., pattern=NOT_BLANK),
    identifier: str | None = Query(None, alias="id"),
    id_type: str | None = Query(None, alias="idType"),
    psn: str | None = Query(None),
    connector: PseudonymConnector = Depends(get_pseudonyms),
):
    connector.delete_pseudonym(domain, identifier, id_type, psn)
    return Response(status_code=204)
