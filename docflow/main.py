import uvicorn

from docflow.api.app_factory import create_app
from docflow.config.settings import Settings
from docflow.database.connection import close_pool, init_pool
from docflow.logging.logger import Log
from docflow.pipeline.service import DocumentService, build_document_service
from docflow.telemetry.metrics import MetricsRecorder


def main() -> None:
    """Entry point: load settings -> open store -> build service -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    uses_postgres = settings.store_backend.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)

    service: DocumentService | None = None
    try:
        metrics = MetricsRecorder(window_size=settings.metrics_window_size)
        service = build_document_service(settings, metrics=metrics)
        app = create_app(service=service, metrics=metrics)
        Log.info(f"Serving document workflow API on {settings.host}:{settings.port}")
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    finally:
        if service is not None:
            service.close()
        if uses_postgres:
            close_pool()
        Log.info("Document workflow API stopped")


if __name__ == "__main__":
    main()
