"""Tests for the connector layer below the HTTP routes: config, tokens, session."""

from __future__ import annotations

import time
from dataclasses import fields

import httpx
import pytest

from acelink.config import AcelinkConfig, load_config
from acelink.domains import DomainConnector
from acelink.errors import SelectorError, TokenError, UpstreamError
from acelink.models import DomainRecord, PseudonymRecord
from acelink.pseudonyms import PseudonymConnector
from acelink.session import AceSession, as_list, wire
from acelink.tokens import EXPIRY_SKEW, KeycloakTokenProvider

from fakes import CONFIG, KEYCLOAK_URL, FakeAce


def _tokens(client: httpx.Client) -> KeycloakTokenProvider:
    return KeycloakTokenProvider(
        client,
        keycloak_url=KEYCLOAK_URL + "/",
        realm=CONFIG.realm,
        client_id=CONFIG.client_id,
        client_secret=CONFIG.client_secret,
        username=CONFIG.username,
        password=CONFIG.password,
    )


@pytest.fixture
def ace():
    return FakeAce()


@pytest.fixture
def http(ace):
    with httpx.Client(transport=httpx.MockTransport(ace)) as c:
        yield c


@pytest.fixture
def session(http):
    return AceSession(http, CONFIG.service_url + "/", _tokens(http))


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class TestConfig:
    def test_defaults_when_no_file(self, tmp_path, monkeypatch):
        for f in fields(AcelinkConfig):
            monkeypatch.delenv(f"ACELINK_{f.name.upper()}", raising=False)
        config = load_config(tmp_path / "absent.ini")
        assert config == AcelinkConfig()

    def test_ini_then_env(self, tmp_path, monkeypatch):
        ini = tmp_path / "acelink.ini"
        ini.write_text(
            "[ace]\nservice_url = http://ace.internal:8080\ntimeout = 5\n"
            "[keycloak]\nurl = http://kc.internal\nrealm = trustdeck\n"
            "client_id = ace\nclient_secret = s\nusername = u\npassword = p\n"
            "[gateway]\nport = 9000\n"
        )
        monkeypatch.setenv("ACELINK_REALM", "override")
        monkeypatch.setenv("ACELINK_PORT", "9100")
        config = load_config(ini)
        assert config.service_url == "http://ace.internal:8080"
        assert config.timeout == 5.0
        assert config.keycloak_url == "http://kc.internal"
        assert config.realm == "override"
        assert config.port == 9100
        assert config.missing() == []

    def test_missing_lists_blank_required_settings(self):
        config = AcelinkConfig(realm="r", client_id="c", username="u")
        assert config.missing() == ["client_secret", "password"]

    def test_repr_masks_secrets(self):
        text = repr(CONFIG)
        assert "client-secret" not in text
        assert "connector-pw" not in text
        assert "client_secret='***'" in text


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TestTokens:
    def test_token_url(self, http):
        assert _tokens(http).token_url == (
            "http://keycloak.test/realms/research/protocol/openid-connect/token"
        )

    def test_cached_until_expiry(self, http, ace):
        provider = _tokens(http)
        assert provider.token() == "tok-1"
        assert provider.token() == "tok-1"
        assert len(ace.token_forms) == 1

    def test_refetched_inside_skew(self, http, ace):
        provider = _tokens(http)
        assert provider.token() == "tok-1"
        provider._expires_at = time.monotonic() + EXPIRY_SKEW + 60
        assert provider.token() == "tok-1"
        provider._expires_at = time.monotonic() + EXPIRY_SKEW - 1
        assert provider.token() == "tok-2"

    def test_no_expires_in_means_no_proactive_refresh(self, http, ace):
        ace.expires_in = None
        provider = _tokens(http)
        provider.token()
        provider.token()
        assert len(ace.token_forms) == 1

    def test_refresh_always_fetches(self, http, ace):
        provider = _tokens(http)
        provider.token()
        assert provider.refresh() == "tok-2"
        assert provider.token() == "tok-2"

    def test_refused(self, http, ace):
        ace.token_status = 400
        with pytest.raises(TokenError, match="refused token request: 400"):
            _tokens(http).token()

    def test_unreachable(self):
        def down(request):
            raise httpx.ConnectError("connection refused")

        with httpx.Client(transport=httpx.MockTransport(down)) as c:
            with pytest.raises(TokenError, match="unreachable"):
                _tokens(c).token()

    def test_missing_access_token(self):
        def odd(request):
            return httpx.Response(200, json={"token_type": "Bearer"})

        with httpx.Client(transport=httpx.MockTransport(odd)) as c:
            with pytest.raises(TokenError, match="no access_token"):
                _tokens(c).token()

    def test_non_object_payload(self):
        def listy(request):
            return httpx.Response(200, json=["not", "an", "object"])

        with httpx.Client(transport=httpx.MockTransport(listy)) as c:
            with pytest.raises(TokenError, match="no access_token"):
                _tokens(c).token()

    def test_non_numeric_expires_in(self):
        def soon(request):
            return httpx.Response(200, json={"access_token": "t", "expires_in": "soon"})

        with httpx.Client(transport=httpx.MockTransport(soon)) as c:
            with pytest.raises(TokenError, match="invalid expires_in"):
                _tokens(c).token()

    def test_refresh_skips_already_replaced_token(self, http, ace):
        provider = _tokens(http)
        assert provider.token() == "tok-1"
        assert provider.refresh(rejected="tok-1") == "tok-2"
        # a second caller that was also holding tok-1 gets tok-2 back
        assert provider.refresh(rejected="tok-1") == "tok-2"
        assert len(ace.token_forms) == 2


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TestSession:
    def test_base_url_normalised(self, session):
        assert session.base_url == "http://ace.test/api/pseudonymization/"

    def test_none_params_dropped_and_bools_lowercased(self, session, ace):
        ace.on("GET", "/domains/d/pseudonyms", json=[])
        session.call(
            "GET",
            "domains/d/pseudonyms",
            action="list",
            params={"a": None, "flag": True, "other": False},
        )
        assert dict(ace.last.url.params) == {"flag": "true", "other": "false"}

    def test_no_body_sends_no_content(self, session, ace):
        ace.on("DELETE", "/domains/d/pseudonyms", status=204)
        session.call("DELETE", "domains/d/pseudonyms", action="delete")
        assert ace.last.content == b""

    def test_single_retry_on_401(self, session, ace):
        ace.rejected_tokens.add("tok-1")
        ace.on("GET", "/domain", json={"name": "d"})
        response = session.call("GET", "domain", action="get")
        assert response.json() == {"name": "d"}
        assert len(ace.requests) == 2

    def test_other_errors_not_retried(self, session, ace):
        ace.on("GET", "/domain", status=403, text="Forbidden")
        with pytest.raises(UpstreamError) as info:
            session.call("GET", "domain", action="retrieve domain")
        assert info.value.status_code == 403
        assert str(info.value) == "Failed to retrieve domain: 403 Forbidden"
        assert len(ace.requests) == 1
        assert len(ace.token_forms) == 1

    def test_timeout_wrapped(self, session, ace):
        ace.fail("GET", "/domain", httpx.ReadTimeout("timed out"))
        with pytest.raises(UpstreamError) as info:
            session.call("GET", "domain", action="retrieve domain")
        assert info.value.status_code is None
        assert isinstance(info.value.__cause__, httpx.ReadTimeout)

    def test_wire_serialises_models(self):
        records = [PseudonymRecord(id="1", id_type="t"), PseudonymRecord(id="2", id_type="t")]
        assert wire(records) == [{"id": "1", "idType": "t"}, {"id": "2", "idType": "t"}]
        assert wire(DomainRecord(super_domain_id=4)) == {"superDomainID": 4}
        assert wire(None) is None

    def test_as_list(self):
        assert as_list(None) == []
        assert as_list({"id": "1"}) == [{"id": "1"}]
        assert as_list([1, 2]) == [1, 2]


# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------


class TestConnectors:
    def test_domain_name_quoted_as_one_segment(self, session, ace):
        ace.on("GET", "/domains/a/b/prefix", json={"prefix": "AB"})
        result = DomainConnector(session).get_domain_attribute("a/b", "prefix")
        assert result == DomainRecord(prefix="AB")
        assert ace.last.url.raw_path == b"/api/pseudonymization/domains/a%2Fb/prefix"

    def test_get_domain_empty_body_is_none(self, session, ace):
        ace.on("GET", "/domain")
        assert DomainConnector(session).get_domain("d") is None

    def test_hierarchy_parsed(self, session, ace):
        ace.on(
            "GET",
            "/experimental/domains/hierarchy",
            json=[{"name": "root"}, {"name": "child", "superDomainName": "root"}],
        )
        domains = DomainConnector(session).get_all_domains()
        assert [d.name for d in domains] == ["root", "child"]
        assert domains[1].super_domain_name == "root"

    def test_delete_pseudonym_without_selector_sends_nothing(self, session, ace):
        with pytest.raises(SelectorError):
            PseudonymConnector(session).delete_pseudonym("d", identifier="1")
        assert ace.requests == []
        assert ace.token_forms == []

    def test_lookup_returns_records(self, session, ace):
        ace.on(
            "GET",
            "/domains/d/pseudonym",
            json={"id": "1", "idType": "t", "psn": "X", "validTo": "2030-01-01T00:00:00"},
        )
        records = PseudonymConnector(session).get_pseudonym_by_psn("d", "X")
        assert len(records) == 1
        assert records[0].psn == "X"
        assert records[0].valid_to.year == 2030
