import base64
import json
from collections.abc import Callable

import httpx
import pytest

from docflow.config.settings import Settings
from docflow.exceptions import ConfigurationError, UpstreamError
from docflow.workflow.models import TriggerStage
from docflow.workflow.oauth import join_url
from docflow.workflow.trigger_client import WorkflowTriggerClient

DESTINATION_URL = "https://destination.test/destination-configuration/v1/destinations/workflow-api"
DESTINATION_CONFIG = {
    "destinationConfiguration": {
        "Name": "workflow-api",
        "URL": "https://workflow.test/",
        "clientId": "wf-client",
        "clientSecret": "wf-secret",
        "tokenServiceURL": "https://wf-auth.test/oauth/token",
    }
}
Handler = Callable[[httpx.Request], httpx.Response]


def _default_routes() -> dict[str, Handler]:
    return {
        "POST https://auth.test/oauth/token": lambda r: httpx.Response(
            200, json={"access_token": "directory-token"}
        ),
        f"GET {DESTINATION_URL}": lambda r: httpx.Response(200, json=DESTINATION_CONFIG),
        "POST https://wf-auth.test/oauth/token": lambda r: httpx.Response(
            200, json={"access_token": "workflow-token"}
        ),
        "POST https://workflow.test/workflow/rest/v1/workflow-instances": lambda r: httpx.Response(
            201, json={"id": "wf-123", "status": "RUNNING"}
        ),
    }


class FakeServices:
    """Routes requests by method and URL and records every call."""

    def __init__(self, overrides: dict[str, Handler] | None = None) -> None:
        self.routes = {**_default_routes(), **(overrides or {})}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url}"
        handler = self.routes.get(key)
        if handler is None:
            return httpx.Response(404, json={"error": f"no route for {key}"})
        return handler(request)

    def calls(self) -> list[str]:
        return [f"{r.method} {r.url}" for r in self.requests]


def _make_client(settings: Settings, services: FakeServices) -> WorkflowTriggerClient:
    return WorkflowTriggerClient.from_settings(settings, transport=httpx.MockTransport(services))


class TestSuccessfulChain:
    def test_runs_all_hops_in_order(self, settings: Settings) -> None:
        services = FakeServices()

        result = _make_client(settings, services).trigger({"definitionId": "x"})

        assert services.calls() == [
            "POST https://auth.test/oauth/token",
            f"GET {DESTINATION_URL}",
            "POST https://wf-auth.test/oauth/token",
            "POST https://workflow.test/workflow/rest/v1/workflow-instances",
        ]
        assert result.instance_id == "wf-123"
        assert result.status == "RUNNING"
        assert result.response == {"id": "wf-123", "status": "RUNNING"}

    def test_token_requests_use_client_credentials_with_basic_auth(
        self, settings: Settings
    ) -> None:
        services = FakeServices()
        _make_client(settings, services).trigger({})

        directory_token_request = services.requests[0]
        expected = base64.b64encode(b"dest-client:dest-secret").decode()
        assert directory_token_request.headers["Authorization"] == f"Basic {expected}"
        assert b"grant_type=client_credentials" in directory_token_request.content

        target_token_request = services.requests[2]
        expected = base64.b64encode(b"wf-client:wf-secret").decode()
        assert target_token_request.headers["Authorization"] == f"Basic {expected}"

    def test_each_hop_uses_its_own_bearer_token(self, settings: Settings) -> None:
        services = FakeServices()
        _make_client(settings, services).trigger({})

        assert services.requests[1].headers["Authorization"] == "Bearer directory-token"
        assert services.requests[3].headers["Authorization"] == "Bearer workflow-token"

    def test_posts_payload_as_json(self, settings: Settings) -> None:
        services = FakeServices()
        _make_client(settings, services).trigger({"definitionId": "invoice", "context": {"a": 1}})

        assert json.loads(services.requests[3].content) == {
            "definitionId": "invoice",
            "context": {"a": 1},
        }

    @pytest.mark.parametrize(
        "body", [{"workflowInstanceId": "i-1"}, {"workflowId": "i-1"}, {"instanceId": "i-1"}]
    )
    def test_reads_instance_id_aliases(self, settings: Settings, body: dict[str, str]) -> None:
        services = FakeServices(
            {
                "POST https://workflow.test/workflow/rest/v1/workflow-instances": (
                    lambda r: httpx.Response(200, json=body)
                )
            }
        )
        result = _make_client(settings, services).trigger({})
        assert result.instance_id == "i-1"
        assert result.status == "TRIGGERED"

    def test_non_json_trigger_response_is_tolerated(self, settings: Settings) -> None:
        services = FakeServices(
            {
                "POST https://workflow.test/workflow/rest/v1/workflow-instances": (
                    lambda r: httpx.Response(202, text="accepted")
                )
            }
        )
        result = _make_client(settings, services).trigger({})
        assert result.instance_id is None
        assert result.status == "TRIGGERED"
        assert result.response == {"raw": "accepted"}


class TestChainFailures:
    def test_missing_binding_fails_before_any_call(self, settings: Settings) -> None:
        services = FakeServices()
        configured = settings.model_copy(update={"destination_auth_url": ""})

        with pytest.raises(ConfigurationError) as exc_info:
            _make_client(configured, services).trigger({})

        assert exc_info.value.stage is TriggerStage.RESOLVE_DESTINATION
        assert services.requests == []

    def test_directory_token_failure_stops_chain(self, settings: Settings) -> None:
        services = FakeServices(
            {
                "POST https://auth.test/oauth/token": lambda r: httpx.Response(
                    401, json={"error": "invalid_client"}
                )
            }
        )
        with pytest.raises(UpstreamError, match="invalid_client") as exc_info:
            _make_client(settings, services).trigger({})

        assert exc_info.value.stage is TriggerStage.FETCH_DESTINATION_TOKEN
        assert exc_info.value.status_code == 401
        assert len(services.requests) == 1

    def test_token_response_without_access_token(self, settings: Settings) -> None:
        services = FakeServices(
            {"POST https://auth.test/oauth/token": lambda r: httpx.Response(200, json={})}
        )
        with pytest.raises(UpstreamError, match="access_token") as exc_info:
            _make_client(settings, services).trigger({})
        assert exc_info.value.stage is TriggerStage.FETCH_DESTINATION_TOKEN

    def test_destination_lookup_failure(self, settings: Settings) -> None:
        services = FakeServices(
            {f"GET {DESTINATION_URL}": lambda r: httpx.Response(404, text="missing")}
        )
        with pytest.raises(UpstreamError) as exc_info:
            _make_client(settings, services).trigger({})

        assert exc_info.value.stage is TriggerStage.LOAD_DESTINATION_CONFIG
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == {"raw": "missing"}
        assert len(services.requests) == 2

    def test_destination_without_configuration(self, settings: Settings) -> None:
        services = FakeServices(
            {f"GET {DESTINATION_URL}": lambda r: httpx.Response(200, json={"owner": {}})}
        )
        with pytest.raises(UpstreamError, match="no configuration"):
            _make_client(settings, services).trigger({})

    def test_target_token_failure(self, settings: Settings) -> None:
        services = FakeServices(
            {
                "POST https://wf-auth.test/oauth/token": lambda r: httpx.Response(
                    503, json={"message": "down"}
                )
            }
        )
        with pytest.raises(UpstreamError, match="down") as exc_info:
            _make_client(settings, services).trigger({})

        assert exc_info.value.stage is TriggerStage.FETCH_TARGET_TOKEN
        assert exc_info.value.status_code == 503
        assert len(services.requests) == 3

    def test_trigger_failure_carries_upstream_body(self, settings: Settings) -> None:
        services = FakeServices(
            {
                "POST https://workflow.test/workflow/rest/v1/workflow-instances": (
                    lambda r: httpx.Response(400, json={"error": {"message": "bad definition"}})
                )
            }
        )
        with pytest.raises(UpstreamError, match="bad definition") as exc_info:
            _make_client(settings, services).trigger({})

        assert exc_info.value.stage is TriggerStage.TRIGGER_WORKFLOW
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == {"error": {"message": "bad definition"}}

    def test_network_failure_is_upstream_error(self, settings: Settings) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        services = FakeServices({"POST https://auth.test/oauth/token": refuse})
        with pytest.raises(UpstreamError, match="Token request failed") as exc_info:
            _make_client(settings, services).trigger({})
        assert exc_info.value.status_code == 502


class TestJoinUrl:
    @pytest.mark.parametrize(
        ("base", "path"),
        [
            ("https://workflow.test/", "/instances"),
            ("https://workflow.test", "instances"),
            ("https://workflow.test//", "//instances"),
        ],
    )
    def test_single_slash_between_parts(self, base: str, path: str) -> None:
        assert join_url(base, path) == "https://workflow.test/instances"


class TestClose:
    def test_closed_client_refuses_to_trigger(self, settings: Settings) -> None:
        services = FakeServices()
        client = _make_client(settings, services)

        client.close()

        with pytest.raises(RuntimeError):
            client.trigger({})
        assert services.requests == []
