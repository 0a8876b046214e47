"""Unit tests for SecretsClient: pagination, search, create and error mapping."""

from typing import Any

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from secrets_manager.aws.client import SecretsClient
from secrets_manager.aws.errors import (
    AuthResolutionError,
    ConflictError,
    NotFoundError,
    TransientNetworkError,
    translate,
)
from secrets_manager.backends import MockBackend
from secrets_manager.domain.secrets import sort_by_name
from secrets_manager.models import Parameter

SEED = {
    "A/B/C/D/1": ("first", '{"a": 1}'),
    "A/B/C/D/2": ("second", "plain"),
    "X/Y/Z/W/3": ("third", "other"),
}


class ScriptedService:
    """Returns canned ListSecrets pages in order; raises any page that is an exception."""

    def __init__(self, pages: list[Any]) -> None:
        self._pages = list(pages)
        self.requests: list[dict[str, Any]] = []

    def list_secrets(self, **kwargs: Any) -> dict[str, Any]:
        self.requests.append(kwargs)
        page = self._pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page


def _page(*names: str, token: str | None = None) -> dict[str, Any]:
    response: dict[str, Any] = {"SecretList": [{"Name": n, "ARN": f"arn:{n}"} for n in names]}
    if token is not None:
        response["NextToken"] = token
    return response


class TestPagination:
    def test_single_page(self):
        """
        Given a backend that answers with one page and no token
        When list_secrets is called
        Then exactly one request is made and all records are returned
        """
        service = ScriptedService([_page("a", "b")])
        records = SecretsClient(service=service).list_secrets()
        assert [r.name for r in records] == ["a", "b"]
        assert len(service.requests) == 1

    def test_follows_tokens_in_order(self):
        """
        Given three pages linked by continuation tokens
        When list_secrets is called
        Then records are concatenated in page order without duplicates
        """
        service = ScriptedService(
            [_page("a", "b", token="t1"), _page("c", token="t2"), _page("d", "e")]
        )
        records = SecretsClient(service=service).list_secrets()
        names = [r.name for r in records]
        assert names == ["a", "b", "c", "d", "e"]
        assert len(names) == len(set(names))

    def test_token_is_forwarded(self):
        """
        Given two pages
        When list_secrets is called
        Then the second request carries the first page's token
        """
        service = ScriptedService([_page("a", token="t1"), _page("b")])
        SecretsClient(service=service).list_secrets()
        assert "NextToken" not in service.requests[0]
        assert service.requests[1]["NextToken"] == "t1"

    def test_requests_maximum_page_size(self):
        """
        Given any backend
        When list_secrets is called
        Then every request asks for 100 results
        """
        service = ScriptedService([_page("a", token="t1"), _page("b")])
        SecretsClient(service=service).list_secrets()
        assert all(r["MaxResults"] == 100 for r in service.requests)

    def test_empty_string_token_terminates(self):
        """
        Given a page whose NextToken is an empty string
        When list_secrets is called
        Then pagination stops after that page
        """
        service = ScriptedService([_page("a", token="")])
        assert [r.name for r in SecretsClient(service=service).list_secrets()] == ["a"]
        assert len(service.requests) == 1

    def test_empty_pages_are_followed(self):
        """
        Given an empty first page that still carries a token
        When list_secrets is called
        Then the next page is fetched
        """
        service = ScriptedService([_page(token="t1"), _page("a")])
        assert [r.name for r in SecretsClient(service=service).list_secrets()] == ["a"]

    def test_filters_repeat_on_every_page(self):
        """
        Given a name filter and two pages
        When search_secrets is called
        Then both requests carry the same filter
        """
        service = ScriptedService([_page("A1", token="t1"), _page("A2")])
        SecretsClient(service=service).search_secrets("name", ["A"])
        expected = [{"Key": "name", "Values": ["A"]}]
        assert [r["Filters"] for r in service.requests] == [expected, expected]

    def test_failure_mid_pagination_propagates(self):
        """
        Given a second page that fails with a throttling error
        When list_secrets is called
        Then TransientNetworkError is raised and no partial list is returned
        """
        throttled = ClientError(
            {"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "ListSecrets"
        )
        service = ScriptedService([_page("a", token="t1"), throttled])
        with pytest.raises(TransientNetworkError) as exc_info:
            SecretsClient(service=service).list_secrets()
        assert exc_info.value.__cause__ is throttled

    def test_connection_error_is_transient(self):
        """
        Given a backend that cannot be reached
        When list_secrets is called
        Then TransientNetworkError is raised
        """
        service = ScriptedService([EndpointConnectionError(endpoint_url="https://example")])
        with pytest.raises(TransientNetworkError):
            SecretsClient(service=service).list_secrets()

    def test_mock_backend_pages_sum(self):
        """
        Given a mock backend serving one secret per page
        When list_secrets is called
        Then the result length equals the number of secrets and one request per page is made
        """
        backend = MockBackend(SEED, page_size=1)
        records = SecretsClient(service=backend).list_secrets()
        assert [r.name for r in records] == list(SEED)
        assert len(backend.requests) == 3


class TestSearchSecrets:
    def test_empty_values_equal_list(self):
        """
        Given identical backend state
        When search_secrets is called with an empty value list
        Then the result equals list_secrets
        """
        client = SecretsClient(service=MockBackend(SEED))
        assert client.search_secrets("name", []) == client.list_secrets()

    def test_blank_values_are_dropped(self):
        """
        Given a value list holding only None and ""
        When search_secrets is called
        Then no filter is sent
        """
        backend = MockBackend(SEED)
        SecretsClient(service=backend).search_secrets("name", [None, ""])
        assert "Filters" not in backend.requests[0][1]

    def test_string_value_is_wrapped(self):
        """
        Given a single string value
        When search_secrets is called
        Then it is sent as a one-item Values list
        """
        backend = MockBackend(SEED)
        SecretsClient(service=backend).search_secrets("name", "A")
        assert backend.requests[0][1]["Filters"] == [{"Key": "name", "Values": ["A"]}]

    def test_unknown_filter_key_raises(self):
        """
        Given an unsupported filter key
        When search_secrets is called
        Then ValueError is raised before any request
        """
        backend = MockBackend(SEED)
        with pytest.raises(ValueError, match="Unknown filter key"):
            SecretsClient(service=backend).search_secrets("colour", ["red"])
        assert backend.requests == []

    def test_end_to_end_prefix_search(self):
        """
        Given secrets A/B/C/D/1, A/B/C/D/2 and X/Y/Z/W/3
        When searching names with prefix "A" and sorting by name
        Then exactly the first two come back, with A/B/C/D/1 first
        """
        client = SecretsClient(service=MockBackend(SEED))
        records = client.search_secrets("name", ["A"])
        assert [r.name for r in records] == ["A/B/C/D/1", "A/B/C/D/2"]
        assert [r.name for r in sort_by_name(records)][0] == "A/B/C/D/1"


class TestGetSecret:
    def test_returns_value_at_stage(self):
        """
        Given a seeded secret
        When get_secret is called with the default stage
        Then the decoded value is returned
        """
        value = SecretsClient(service=MockBackend(SEED)).get_secret("A/B/C/D/1")
        assert value.name == "A/B/C/D/1"
        assert value.stages == ["AWSCURRENT"]
        assert value.serialize() == {"a": 1}

    def test_stage_is_forwarded(self):
        """
        Given any backend
        When get_secret is called with a stage label
        Then the request carries that VersionStage
        """
        backend = MockBackend(SEED)
        with pytest.raises(NotFoundError):
            SecretsClient(service=backend).get_secret("A/B/C/D/1", "AWSPENDING")
        assert backend.requests[-1][1]["VersionStage"] == "AWSPENDING"

    def test_missing_secret_raises_not_found(self):
        """
        Given a backend without the name
        When get_secret is called
        Then NotFoundError is raised
        """
        with pytest.raises(NotFoundError):
            SecretsClient(service=MockBackend(SEED)).get_secret("missing")


class TestCreateSecret:
    PARAMETER = Parameter.create("Acme/Production/Billing/Database/Credentials")

    def test_creates_with_hierarchical_name_and_tags(self):
        """
        Given an empty backend
        When create_secret is called
        Then the request uses the joined name, the description and five tags
        """
        backend = MockBackend({})
        result = SecretsClient(service=backend).create_secret(self.PARAMETER, "db login", "s3cr3t")
        op, request = backend.requests[-1]
        assert op == "CreateSecret"
        assert request["Name"] == "Acme/Production/Billing/Database/Credentials"
        assert request["Description"] == "db login"
        assert request["SecretString"] == "s3cr3t"
        assert request["ForceOverwriteReplicaSecret"] is False
        assert [t["Key"] for t in request["Tags"]] == [
            "Organization",
            "Environment",
            "Application",
            "Resource",
            "Identifier",
        ]
        assert result.name == self.PARAMETER.name
        assert result.version

    def test_existing_name_without_overwrite_conflicts(self):
        """
        Given a backend already holding the name
        When create_secret is called with overwrite=False
        Then ConflictError is raised and nothing is updated
        """
        backend = MockBackend({self.PARAMETER.name: ("old", "old-value")})
        client = SecretsClient(service=backend)
        with pytest.raises(ConflictError):
            client.create_secret(self.PARAMETER, "new", "new-value")
        assert client.get_secret(self.PARAMETER.name).secret == "old-value"

    def test_existing_name_with_overwrite_replaces(self):
        """
        Given a backend already holding the name
        When create_secret is called with overwrite=True
        Then it succeeds, the value is named after the parameter and the new payload is current
        """
        backend = MockBackend({self.PARAMETER.name: ("old", "old-value")})
        client = SecretsClient(service=backend)
        result = client.create_secret(self.PARAMETER, "new", "new-value", overwrite=True)
        assert result.name == self.PARAMETER.name
        assert client.get_secret(self.PARAMETER.name).secret == "new-value"
        ops = [op for op, _ in backend.requests]
        assert ops[:3] == ["CreateSecret", "UpdateSecret", "TagResource"]

    def test_overwrite_refreshes_description_and_tags(self):
        """
        Given an existing untagged secret
        When it is overwritten
        Then the listing shows the new description and the five tags
        """
        backend = MockBackend({self.PARAMETER.name: ("old", "old-value")})
        client = SecretsClient(service=backend)
        client.create_secret(self.PARAMETER, "new", "new-value", overwrite=True)
        record = client.list_secrets()[0]
        assert record.description == "new"
        assert len(record.tags) == 5


class TestLazyResolution:
    def test_injected_service_skips_credentials(self, monkeypatch):
        """
        Given a client built with an injected backend
        When an operation runs
        Then credentials are never resolved
        """

        def boom(*args, **kwargs):
            raise AssertionError("credentials resolved")

        monkeypatch.setattr("secrets_manager.aws.client.resolve_credentials", boom)
        SecretsClient(service=MockBackend(SEED)).list_secrets()

    def test_constructor_does_no_io(self, monkeypatch):
        """
        Given a profile that cannot be resolved
        When SecretsClient is constructed
        Then no error is raised until an operation runs
        """

        def boom(*args, **kwargs):
            raise AssertionError("session created")

        monkeypatch.setattr("secrets_manager.aws.client.create_session", boom)
        client = SecretsClient(profile="nowhere")
        assert client.profile == "nowhere"


class TestTranslate:
    def _client_error(self, code: str) -> ClientError:
        return ClientError({"Error": {"Code": code, "Message": "msg"}}, "GetSecretValue")

    def test_codes_map_onto_taxonomy(self):
        """
        Given ClientErrors with known Secrets Manager codes
        When translate is called
        Then each maps to its taxonomy class and the message names the code
        """
        expected = {
            "ResourceNotFoundException": NotFoundError,
            "ResourceExistsException": ConflictError,
            "ExpiredTokenException": AuthResolutionError,
            "ThrottlingException": TransientNetworkError,
        }
        for code, error_type in expected.items():
            error = translate(self._client_error(code), "GetSecretValue")
            assert type(error) is error_type
            assert code in str(error)

    def test_missing_code_is_transient(self):
        """
        Given a ClientError whose response has no Error block
        When translate is called
        Then a TransientNetworkError marked unknown is returned
        """
        error = translate(ClientError({}, "ListSecrets"), "ListSecrets")
        assert isinstance(error, TransientNetworkError)
        assert "unknown" in str(error)

    def test_taxonomy_errors_pass_through(self):
        """
        Given an error already in the taxonomy
        When translate is called
        Then the same object is returned
        """
        original = ConflictError("taken")
        assert translate(original, "CreateSecret") is original
