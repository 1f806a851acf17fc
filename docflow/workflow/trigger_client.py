"""Chained client that starts an approval workflow instance.

The chain runs strictly in order and stops at the first failing hop:

    RESOLVE_DESTINATION -> FETCH_DESTINATION_TOKEN -> LOAD_DESTINATION_CONFIG
        -> FETCH_TARGET_TOKEN -> TRIGGER_WORKFLOW -> DONE

No hop is retried here. Every raised error carries the stage it failed at.
"""

from collections.abc import Callable
from typing import Any

import httpx

from docflow.config.settings import Settings
from docflow.exceptions import UpstreamError
from docflow.logging.logger import Log, mask
from docflow.net.response_body import error_message, read_response_body
from docflow.workflow.destination import (
    parse_destination_configuration,
    resolve_destination_binding,
)
from docflow.workflow.models import (
    DestinationBinding,
    DestinationConfiguration,
    TriggerStage,
    WorkflowTriggerResult,
)
from docflow.workflow.oauth import fetch_client_credentials_token, join_url

DESTINATION_LOOKUP_PATH = "/destination-configuration/v1/destinations/"
INSTANCE_ID_FIELDS = ("id", "workflowInstanceId", "workflowId", "instanceId")
DEFAULT_STATUS = "TRIGGERED"


class WorkflowTriggerClient:
    """Starts workflow instances on the engine behind a named destination."""

    def __init__(
        self,
        *,
        destination_name: str,
        trigger_path: str,
        binding_resolver: Callable[[], DestinationBinding],
        timeout_seconds: int = 30,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._destination_name = destination_name
        self._trigger_path = trigger_path
        self._binding_resolver = binding_resolver
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> "WorkflowTriggerClient":
        return cls(
            destination_name=settings.workflow_destination_name,
            trigger_path=settings.workflow_trigger_path,
            binding_resolver=lambda: resolve_destination_binding(settings),
            timeout_seconds=settings.workflow_timeout_seconds,
            transport=transport,
        )

    def trigger(self, payload: dict[str, Any]) -> WorkflowTriggerResult:
        """Run the full chain and start one workflow instance with ``payload``.

        Raises:
            ConfigurationError: if the binding or destination is incomplete.
            UpstreamError: if any remote hop fails.
        """
        Log.info(f"Workflow trigger: {TriggerStage.RESOLVE_DESTINATION.value}")
        binding = self._binding_resolver()

        Log.info(
            f"Workflow trigger: {TriggerStage.FETCH_DESTINATION_TOKEN.value} "
            f"(client {mask(binding.client_id)})"
        )
        directory_token = fetch_client_credentials_token(
            self._client,
            token_url=join_url(binding.auth_url, "/oauth/token"),
            client_id=binding.client_id,
            client_secret=binding.client_secret,
            stage=TriggerStage.FETCH_DESTINATION_TOKEN,
        )

        Log.info(
            f"Workflow trigger: {TriggerStage.LOAD_DESTINATION_CONFIG.value} "
            f"({self._destination_name})"
        )
        destination = self._load_destination(binding, directory_token)

        Log.info(f"Workflow trigger: {TriggerStage.FETCH_TARGET_TOKEN.value}")
        target_token = fetch_client_credentials_token(
            self._client,
            token_url=destination.token_service_url,
            client_id=destination.client_id,
            client_secret=destination.client_secret,
            stage=TriggerStage.FETCH_TARGET_TOKEN,
        )

        Log.info(f"Workflow trigger: {TriggerStage.TRIGGER_WORKFLOW.value}")
        result = self._start_instance(destination, target_token, payload)
        Log.info(
            f"Workflow trigger: {TriggerStage.DONE.value} "
            f"(instance {result.instance_id}, status {result.status})"
        )
        return result

    def close(self) -> None:
        self._client.close()

    def _load_destination(
        self,
        binding: DestinationBinding,
        token: str,
    ) -> DestinationConfiguration:
        stage = TriggerStage.LOAD_DESTINATION_CONFIG
        url = join_url(binding.service_url, DESTINATION_LOOKUP_PATH + self._destination_name)
        try:
            response = self._client.get(url, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Destination lookup failed: {exc}", status_code=502, stage=stage
            ) from exc

        _, body = read_response_body(response)
        if not response.is_success:
            raise UpstreamError(
                error_message(body, f"Destination lookup failed with status {response.status_code}"),
                status_code=response.status_code,
                detail=body,
                stage=stage,
            )
        return parse_destination_configuration(self._destination_name, body)

    def _start_instance(
        self,
        destination: DestinationConfiguration,
        token: str,
        payload: dict[str, Any],
    ) -> WorkflowTriggerResult:
        stage = TriggerStage.TRIGGER_WORKFLOW
        url = join_url(destination.url, self._trigger_path)
        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Workflow trigger failed: {exc}", status_code=502, stage=stage
            ) from exc

        _, body = read_response_body(response)
        if not response.is_success:
            raise UpstreamError(
                error_message(body, f"Workflow trigger failed with status {response.status_code}"),
                status_code=response.status_code,
                detail=body,
                stage=stage,
            )
        return WorkflowTriggerResult(
            instance_id=extract_instance_id(body),
            status=extract_status(body),
            response=body,
        )


def extract_instance_id(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for name in INSTANCE_ID_FIELDS:
        value = body.get(name)
        if value:
            return str(value)
    return None


def extract_status(body: Any) -> str:
    status = body.get("status") if isinstance(body, dict) else None
    return str(status) if status else DEFAULT_STATUS
