"""Domain management calls against ACE."""

from __future__ import annotations

from acelink.models import DomainRecord
from acelink.session import AceSession, as_list, parse_body, segment, to_model, to_models


class DomainConnector:
    def __init__(self, session: AceSession):
        self._session = session

    def _one(self, method: str, path: str, action: str, **kwargs) -> DomainRecord | None:
        response = self._session.call(method, path, action=action, **kwargs)
        return to_model(DomainRecord, parse_body(response, action), action)

    def get_all_domains(self) -> list[DomainRecord]:
        """Every domain in the hierarchy, flattened."""
        action = "retrieve domains"
        response = self._session.call(
            "GET", "experimental/domains/hierarchy", action=action
        )
        return to_models(DomainRecord, as_list(parse_body(response, action)), action)

    def get_domain(self, name: str) -> DomainRecord | None:
        return self._one("GET", "domain", "retrieve domain", params={"name": name})

    def get_domain_attribute(self, name: str, attribute: str) -> DomainRecord | None:
        """A partial record holding just the requested attribute."""
        return self._one(
            "GET",
            f"domains/{segment(name)}/{segment(attribute)}",
            "retrieve domain attribute",
        )

    def create_domain(self, domain: DomainRecord) -> DomainRecord | None:
        return self._one("POST", "domain", "create domain", body=domain)

    def create_domain_complete(self, domain: DomainRecord) -> DomainRecord | None:
        """Create a domain with every setting given explicitly."""
        return self._one("POST", "domain/complete", "create domain", body=domain)

    def update_domain(self, name: str, domain: DomainRecord) -> DomainRecord | None:
        return self._one(
            "PUT", "domain", "update domain", params={"name": name}, body=domain
        )

    def update_domain_complete(
        self, name: str, domain: DomainRecord, recursive: bool
    ) -> DomainRecord | None:
        """Replace every setting; recursive pushes inherited values to sub-domains."""
        return self._one(
            "PUT",
            "domain/complete",
            "update domain",
            params={"name": name, "recursive": recursive},
            body=domain,
        )

    def delete_domain(self, name: str, recursive: bool) -> None:
        self._session.call(
            "DELETE",
            "domain",
            action="delete domain",
            params={"name": name, "recursive": recursive},
        )

    def update_salt(self, name: str, salt: str, allow_empty: bool) -> DomainRecord | None:
        return self._one(
            "PUT",
            f"domains/{segment(name)}/salt",
            "update salt",
            params={"salt": salt, "allowEmpty": allow_empty},
        )
