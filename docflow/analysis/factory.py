from docflow.analysis.client_base import BaseAnalysisClient
from docflow.analysis.example_client_adapter import ExampleAnalysisClient
from docflow.analysis.http_client_adapter import HttpAnalysisClient
from docflow.analysis.openai_client_adapter import OpenAIAnalysisClient
from docflow.config.settings import Settings


class AnalysisClientFactory:
    """Creates the configured inference client."""

    PROVIDERS = ("http", "openai", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisClient:
        provider = settings.analysis_provider.lower()
        if provider == "http":
            return HttpAnalysisClient(
                url=settings.genai_api_url,
                model=settings.genai_model,
                api_key=settings.genai_api_key,
                timeout_seconds=settings.genai_timeout_seconds,
            )
        if provider == "openai":
            return OpenAIAnalysisClient(
                api_key=settings.genai_api_key,
                model=settings.genai_model,
                timeout_seconds=settings.genai_timeout_seconds,
                base_url=settings.genai_api_url.strip() or None,
            )
        if provider == "example":
            return ExampleAnalysisClient()
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
