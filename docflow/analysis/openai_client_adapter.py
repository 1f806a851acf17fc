import json

import httpx
import openai

from docflow.analysis.client_base import BaseAnalysisClient
from docflow.analysis.models import AnalysisResponse
from docflow.exceptions import UpstreamError


class OpenAIAnalysisClient(BaseAnalysisClient):
    """Inference client built on the OpenAI-compatible chat completions API.

    The reply is reshaped into ``{"choices": [{"message": {"content": ...}}]}``
    so it goes through the same result parser as the generic HTTP provider.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._model = model
        # one attempt per analyze call; re-running is up to the caller
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
            http_client=http_client,
        )

    def analyze(self, prompt: str, extracted_text: str) -> AnalysisResponse:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": prompt},
                    {"role": "user", "content": extracted_text},
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamError(f"AI provider timed out: {exc}", status_code=504) from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise UpstreamError(f"AI provider network error: {exc}", status_code=502) from exc
        except openai.APIStatusError as exc:
            raise UpstreamError(
                f"AI provider API error: {exc}",
                status_code=exc.status_code,
                detail=exc.body,
            ) from exc
        except openai.APIError as exc:
            raise UpstreamError(f"AI provider API error: {exc}") from exc

        content = response.choices[0].message.content if response.choices else None
        body = {"choices": [{"message": {"content": content}}]}
        return AnalysisResponse(raw_text=json.dumps(body), body=body)

    def close(self) -> None:
        self._client.close()
