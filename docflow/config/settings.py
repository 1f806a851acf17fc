from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    app_env: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    metrics_window_size: int = 1000
    rag_max_documents: int = 500

    document_max_size: int = 10 * 1024 * 1024
    allowed_mime_types: Annotated[tuple[str, ...], NoDecode] = ("application/pdf",)
    document_storage_path: str = "data/documents"
    pdf_engine: str = "pdfplumber"

    analysis_provider: str = "http"
    genai_api_url: str = ""
    genai_api_key: str = ""
    genai_model: str = "gpt-4o-mini"
    genai_timeout_seconds: int = 30

    feedback_confidence_threshold: float = 0.8
    amount_threshold: float = 10000
    high_risk_levels: Annotated[tuple[str, ...], NoDecode] = ("high", "critical")

    vcap_services: str = ""
    destination_service_name: str = "destination"
    destination_client_id: str = ""
    destination_client_secret: str = ""
    destination_auth_url: str = ""
    destination_service_url: str = ""
    workflow_destination_name: str = "workflow-api"
    workflow_trigger_path: str = "/workflow/rest/v1/workflow-instances"
    workflow_definition_id: str = "invoice_approval"
    workflow_timeout_seconds: int = 30

    store_backend: str = "memory"
    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docflow"
    db_username: str = "docflow"
    db_password: str = "secret"

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def _split_mime_types(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @field_validator("high_risk_levels", mode="before")
    @classmethod
    def _split_risk_levels(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(str(part).strip().lower() for part in value if str(part).strip())
        return value
