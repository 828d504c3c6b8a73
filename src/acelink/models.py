"""Wire models shared with ACE.

Field names are snake_case in Python and camelCase on the wire. Unset
fields are omitted when forwarding so ACE applies its own defaults.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PseudonymRecord(AceModel):
    """One identifier and its pseudonym within a domain."""

    id: str
    id_type: str
    psn: str | None = None
    valid_from: datetime | None = None
    valid_from_inherited: bool | None = None
    valid_to: datetime | None = None
    valid_to_inherited: bool | None = None
    validity_time: str | None = None
    domain_name: str | None = None

    @field_validator("id", "id_type")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class DomainRecord(AceModel):
    """A domain and its pseudonymization settings.

    Every setting has an ``*_inherited`` twin telling whether the value
    came from the super-domain. All fields are optional: ACE returns
    partial records for attribute lookups.
    """

    id: int | None = None
    name: str | None = None
    prefix: str | None = None
    valid_from: datetime | None = None
    valid_from_inherited: bool | None = None
    valid_to: datetime | None = None
    validity_time: str | None = None
    valid_to_inherited: bool | None = None
    enforce_start_date_validity: bool | None = None
    enforce_start_date_validity_inherited: bool | None = None
    enforce_end_date_validity: bool | None = None
    enforce_end_date_validity_inherited: bool | None = None
    algorithm: str | None = None
    algorithm_inherited: bool | None = None
    alphabet: str | None = None
    alphabet_inherited: bool | None = None
    random_algorithm_desired_size: int | None = None
    random_algorithm_desired_size_inherited: bool | None = None
    random_algorithm_desired_success_probability: float | None = None
    random_algorithm_desired_success_probability_inherited: bool | None = None
    multiple_psn_allowed: bool | None = None
    multiple_psn_allowed_inherited: bool | None = None
    consecutive_value_counter: int | None = None
    pseudonym_length: int | None = None
    pseudonym_length_inherited: bool | None = None
    padding_character: str | None = Field(default=None, min_length=1, max_length=1)
    padding_character_inherited: bool | None = None
    add_check_digit: bool | None = None
    add_check_digit_inherited: bool | None = None
    length_includes_check_digit: bool | None = None
    length_includes_check_digit_inherited: bool | None = None
    salt: str | None = None
    salt_length: int | None = None
    description: str | None = None
    super_domain_id: int | None = Field(default=None, alias="superDomainID")
    super_domain_name: str | None = None
