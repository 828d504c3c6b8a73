"""Pseudonym calls against ACE.

Lookups come back as lists even when ACE answers with a single record,
since one identifier may map to several pseudonyms in domains that
allow it.
"""

from __future__ import annotations

from typing import Any

from acelink.errors import SelectorError
from acelink.models import PseudonymRecord
from acelink.session import AceSession, as_list, parse_body, segment, to_model, to_models


def _pseudonym_path(domain: str, suffix: str = "pseudonym") -> str:
    return f"domains/{segment(domain)}/{suffix}"


class PseudonymConnector:
    def __init__(self, session: AceSession):
        self._session = session

    def _many(self, method: str, path: str, action: str, **kwargs) -> list[PseudonymRecord]:
        response = self._session.call(method, path, action=action, **kwargs)
        return to_models(PseudonymRecord, as_list(parse_body(response, action)), action)

    def _one(self, method: str, path: str, action: str, **kwargs) -> PseudonymRecord | None:
        response = self._session.call(method, path, action=action, **kwargs)
        return to_model(PseudonymRecord, parse_body(response, action), action)

    # ── Create ────────────────────────────────────────────────

    def create_pseudonym_batch(
        self, domain: str, records: list[PseudonymRecord], omit_prefix: bool = False
    ) -> list[PseudonymRecord]:
        return self._many(
            "POST",
            _pseudonym_path(domain, "pseudonyms"),
            "create pseudonym batch",
            params={"omitPrefix": omit_prefix},
            body=records,
        )

    def create_pseudonym(
        self, domain: str, record: PseudonymRecord, omit_prefix: bool = False
    ) -> list[PseudonymRecord]:
        return self._many(
            "POST",
            _pseudonym_path(domain),
            "create pseudonym",
            params={"omitPrefix": omit_prefix},
            body=record,
        )

    # ── Read ──────────────────────────────────────────────────

    def get_linked_pseudonyms(
        self,
        source_domain: str,
        target_domain: str,
        source_identifier: str | None = None,
        source_id_type: str | None = None,
        source_psn: str | None = None,
    ) -> list[PseudonymRecord]:
        """Pseudonyms in target_domain belonging to the same identity as the source."""
        return self._many(
            "GET",
            "domains/linked-pseudonyms",
            "get linked pseudonyms",
            params={
                "sourceDomain": source_domain,
                "targetDomain": target_domain,
                "sourceIdentifier": source_identifier,
                "sourceIdType": source_id_type,
                "sourcePsn": source_psn,
            },
        )

    def get_pseudonym_by_identifier(
        self, domain: str, identifier: str, id_type: str
    ) -> list[PseudonymRecord]:
        return self._many(
            "GET",
            _pseudonym_path(domain),
            "retrieve pseudonym",
            params={"id": identifier, "idType": id_type},
        )

    def get_pseudonym_by_psn(self, domain: str, psn: str) -> list[PseudonymRecord]:
        return self._many(
            "GET", _pseudonym_path(domain), "retrieve pseudonym", params={"psn": psn}
        )

    def get_pseudonym_batch(self, domain: str) -> list[PseudonymRecord]:
        return self._many(
            "GET", _pseudonym_path(domain, "pseudonyms"), "fetch pseudonym batch"
        )

    # ── Update ────────────────────────────────────────────────

    def update_pseudonym_batch(self, domain: str, records: list[PseudonymRecord]) -> None:
        self._session.call(
            "PUT",
            _pseudonym_path(domain, "pseudonyms"),
            action="update pseudonym batch",
            body=records,
        )

    def update_pseudonym_complete_by_identifier(
        self, domain: str, record: PseudonymRecord, identifier: str, id_type: str
    ) -> PseudonymRecord | None:
        return self._one(
            "PUT",
            _pseudonym_path(domain, "pseudonym/complete"),
            "update complete pseudonym",
            params={"id": identifier, "idType": id_type},
            body=record,
        )

    def update_pseudonym_complete_by_psn(
        self, domain: str, record: PseudonymRecord, psn: str
    ) -> PseudonymRecord | None:
        return self._one(
            "PUT",
            _pseudonym_path(domain, "pseudonym/complete"),
            "update complete pseudonym",
            params={"psn": psn},
            body=record,
        )

    def update_pseudonym_by_identifier(
        self, domain: str, identifier: str, id_type: str, record: PseudonymRecord
    ) -> PseudonymRecord | None:
        return self._one(
            "PUT",
            _pseudonym_path(domain),
            "update pseudonym",
            params={"id": identifier, "idType": id_type},
            body=record,
        )

    def update_pseudonym_by_psn(
        self, domain: str, psn: str, record: PseudonymRecord
    ) -> PseudonymRecord | None:
        return self._one(
            "PUT",
            _pseudonym_path(domain),
            "update pseudonym",
            params={"psn": psn},
            body=record,
        )

    # ── Delete ────────────────────────────────────────────────

    def delete_pseudonym_batch(self, domain: str) -> None:
        self._session.call(
            "DELETE",
            _pseudonym_path(domain, "pseudonyms"),
            action="delete pseudonym batch",
        )

    def delete_pseudonym(
        self,
        domain: str,
        identifier: str | None = None,
        id_type: str | None = None,
        psn: str | None = None,
    ) -> None:
        """Delete one record, selected by identifier and type, or else by psn."""
        if identifier is not None and id_type is not None:
            params = {"id": identifier, "idType": id_type}
        elif psn is not None:
            params = {"psn": psn}
        else:
            raise SelectorError("Either identifier and idType or psn must be provided")
        self._session.call(
            "DELETE", _pseudonym_path(domain), action="delete pseudonym", params=params
        )

    # ── Validate ──────────────────────────────────────────────

    def validate_pseudonym(self, domain: str, psn: str) -> Any:
        """ACE's verdict on psn, passed through as JSON or plain text."""
        action = "validate pseudonym"
        response = self._session.call(
            "GET",
            _pseudonym_path(domain, "pseudonym/validation"),
            action=action,
            params={"psn": psn},
        )
        if "json" in response.headers.get("content-type", ""):
            return parse_body(response, action)
        return response.text
