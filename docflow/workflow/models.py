from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TriggerStage(str, Enum):
    """Hops of the workflow trigger chain, in execution order."""

    RESOLVE_DESTINATION = "RESOLVE_DESTINATION"
    FETCH_DESTINATION_TOKEN = "FETCH_DESTINATION_TOKEN"
    LOAD_DESTINATION_CONFIG = "LOAD_DESTINATION_CONFIG"
    FETCH_TARGET_TOKEN = "FETCH_TARGET_TOKEN"
    TRIGGER_WORKFLOW = "TRIGGER_WORKFLOW"
    DONE = "DONE"


@dataclass(frozen=True)
class DestinationBinding:
    """Credentials for the destination directory service and its token authority."""

    client_id: str
    client_secret: str
    auth_url: str
    service_url: str


@dataclass(frozen=True)
class DestinationConfiguration:
    """A named external destination: where it lives and how to get a token for it."""

    name: str
    url: str
    client_id: str
    client_secret: str
    token_service_url: str


@dataclass(frozen=True)
class WorkflowTriggerResult:
    instance_id: str | None
    status: str
    response: Any = field(default_factory=dict)
