from abc import ABC, abstractmethod

from docflow.analysis.models import AnalysisResponse


class BaseAnalysisClient(ABC):
    """Contract for provider-specific inference clients."""

    @abstractmethod
    def analyze(self, prompt: str, extracted_text: str) -> AnalysisResponse:
        """Send one analysis request.

        Args:
            prompt: Instruction text from ``build_analysis_prompt``.
            extracted_text: Normalized document text, sent as the model input.

        Returns:
            AnalysisResponse with the raw response text and its parsed body.

        Raises:
            ConfigurationError: if the provider is not configured.
            UpstreamError: if the provider rejects the call or cannot be reached.
        """

    def close(self) -> None:
        """Release network resources held by the client. No-op by default."""
