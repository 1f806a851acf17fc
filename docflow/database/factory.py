from dataclasses import dataclass

from docflow.config.settings import Settings
from docflow.database.repositories.analysis_repository import PostgresAnalysisRepository
from docflow.database.repositories.base import (
    AnalysisRepository,
    DocumentRepository,
    FeedbackRepository,
)
from docflow.database.repositories.document_repository import PostgresDocumentRepository
from docflow.database.repositories.feedback_repository import PostgresFeedbackRepository
from docflow.database.repositories.memory import (
    InMemoryAnalysisRepository,
    InMemoryDocumentRepository,
    InMemoryFeedbackRepository,
)


@dataclass(frozen=True)
class Repositories:
    documents: DocumentRepository
    analyses: AnalysisRepository
    feedback: FeedbackRepository


class RepositoryFactory:
    """Creates the repositories for the configured store backend."""

    BACKENDS = ("memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> Repositories:
        backend = settings.store_backend.lower()
        if backend == "memory":
            return Repositories(
                documents=InMemoryDocumentRepository(),
                analyses=InMemoryAnalysisRepository(),
                feedback=InMemoryFeedbackRepository(),
            )
        if backend == "postgres":
            return Repositories(
                documents=PostgresDocumentRepository(),
                analyses=PostgresAnalysisRepository(),
                feedback=PostgresFeedbackRepository(),
            )
        raise ValueError(f"Unknown store backend '{backend}'. Choose from: {list(cls.BACKENDS)}")
