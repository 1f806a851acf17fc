import httpx

from docflow.analysis.client_base import BaseAnalysisClient
from docflow.analysis.models import AnalysisResponse
from docflow.exceptions import ConfigurationError, UpstreamError
from docflow.logging.logger import Log
from docflow.net.response_body import error_message, read_response_body


class HttpAnalysisClient(BaseAnalysisClient):
    """Posts ``{model, prompt, input}`` to a generic inference endpoint."""

    def __init__(
        self,
        *,
        url: str,
        model: str,
        api_key: str = "",
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url.strip()
        self._model = model
        self._api_key = api_key
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def analyze(self, prompt: str, extracted_text: str) -> AnalysisResponse:
        if not self._url:
            raise ConfigurationError("GENAI_API_URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        Log.debug(f"Calling inference endpoint {self._url} with model {self._model}")
        try:
            response = self._client.post(
                self._url,
                headers=headers,
                json={"model": self._model, "prompt": prompt, "input": extracted_text},
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"GenAI request timed out: {exc}", status_code=504) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GenAI request failed: {exc}", status_code=502) from exc

        raw_text, body = read_response_body(response)
        if not response.is_success:
            raise UpstreamError(
                error_message(body, "GenAI request failed"),
                status_code=response.status_code,
                detail=body,
            )
        return AnalysisResponse(raw_text=raw_text, body=body)

    def close(self) -> None:
        self._client.close()
