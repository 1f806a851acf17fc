import json

import httpx
import pytest

from docflow.analysis.http_client_adapter import HttpAnalysisClient
from docflow.exceptions import ConfigurationError, ErrorKind, UpstreamError


def _make_client(
    handler,  # type: ignore[no-untyped-def]
    url: str = "https://mock.genai.local",
    api_key: str = "",
) -> HttpAnalysisClient:
    return HttpAnalysisClient(
        url=url,
        model="gpt-4o-mini",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestHttpAnalysisClient:
    def test_returns_structured_payload(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"result": {"amount": 10}})

        result = _make_client(handler).analyze("prompt", "input")

        assert result.body == {"result": {"amount": 10}}
        assert json.loads(result.raw_text) == {"result": {"amount": 10}}
        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == "https://mock.genai.local"

    def test_sends_model_prompt_and_input(self) -> None:
        captured: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured.update(json.loads(request.content))
            return httpx.Response(200, json={})

        _make_client(handler).analyze("the prompt", "the text")

        assert captured == {"model": "gpt-4o-mini", "prompt": "the prompt", "input": "the text"}

    def test_adds_bearer_header_when_key_configured(self) -> None:
        headers: list[httpx.Headers] = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers)
            return httpx.Response(200, json={})

        _make_client(handler, api_key="secret-key").analyze("p", "i")
        _make_client(handler).analyze("p", "i")

        assert headers[0]["Authorization"] == "Bearer secret-key"
        assert "Authorization" not in headers[1]

    def test_keeps_non_json_body_as_raw(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="plain words")

        result = _make_client(handler).analyze("p", "i")

        assert result.raw_text == "plain words"
        assert result.body == {"raw": "plain words"}

    def test_oversized_integer_literal_is_kept_as_raw(self) -> None:
        text = '{"amount": ' + "1" * 5000 + "}"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=text)

        result = _make_client(handler).analyze("p", "i")

        assert result.body == {"raw": text}

    def test_empty_body_parses_to_empty_object(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"")

        assert _make_client(handler).analyze("p", "i").body == {}

    def test_raises_when_api_returns_non_2xx(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "boom"})

        with pytest.raises(UpstreamError, match="boom") as exc_info:
            _make_client(handler).analyze("p", "i")

        assert exc_info.value.status_code == 500
        assert exc_info.value.kind is ErrorKind.UPSTREAM
        assert exc_info.value.detail == {"error": "boom"}

    def test_non_2xx_without_error_field_uses_generic_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="slow down")

        with pytest.raises(UpstreamError, match="GenAI request failed") as exc_info:
            _make_client(handler).analyze("p", "i")

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == {"raw": "slow down"}

    def test_unconfigured_url_fails_without_network_call(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        with pytest.raises(ConfigurationError, match="GENAI_API_URL is not configured"):
            _make_client(handler, url="").analyze("p", "i")
        assert calls == []

    def test_timeout_becomes_upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError, match="timed out") as exc_info:
            _make_client(handler).analyze("p", "i")
        assert exc_info.value.status_code == 504

    def test_connection_error_becomes_upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError, match="GenAI request failed") as exc_info:
            _make_client(handler).analyze("p", "i")
        assert exc_info.value.status_code == 502

    def test_close_releases_http_client(self) -> None:
        client = _make_client(lambda request: httpx.Response(200, json={}))

        client.close()

        with pytest.raises(RuntimeError):
            client.analyze("p", "i")
