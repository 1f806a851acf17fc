"""Resolution of the destination service binding and destination payloads."""

import json
from typing import Any

from docflow.config.settings import Settings
from docflow.exceptions import ConfigurationError, UpstreamError
from docflow.workflow.models import DestinationBinding, DestinationConfiguration, TriggerStage


def resolve_destination_binding(settings: Settings) -> DestinationBinding:
    """Find the destination service binding.

    A binding labelled ``settings.destination_service_name`` in ``VCAP_SERVICES``
    wins; otherwise the explicit ``DESTINATION_*`` settings are used.

    Raises:
        ConfigurationError: if no complete binding is available.
    """
    credentials = _credentials_from_vcap(settings.vcap_services, settings.destination_service_name)
    if credentials is None:
        credentials = {
            "clientid": settings.destination_client_id,
            "clientsecret": settings.destination_client_secret,
            "url": settings.destination_auth_url,
            "uri": settings.destination_service_url,
        }

    binding = DestinationBinding(
        client_id=str(credentials.get("clientid") or ""),
        client_secret=str(credentials.get("clientsecret") or ""),
        auth_url=str(credentials.get("url") or ""),
        service_url=str(credentials.get("uri") or ""),
    )
    missing = [
        name
        for name, value in (
            ("clientid", binding.client_id),
            ("clientsecret", binding.client_secret),
            ("url", binding.auth_url),
            ("uri", binding.service_url),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Destination service binding '{settings.destination_service_name}' "
            f"is missing: {', '.join(missing)}",
            stage=TriggerStage.RESOLVE_DESTINATION,
        )
    return binding


def parse_destination_configuration(name: str, body: Any) -> DestinationConfiguration:
    """Build a DestinationConfiguration from a destination lookup response.

    Field names are matched case-insensitively (``URL``/``url``,
    ``clientId``/``clientid``/``client_id`` and so on).

    Raises:
        UpstreamError: if the response carries no ``destinationConfiguration``.
        ConfigurationError: if the destination has no URL or OAuth client.
    """
    config = body.get("destinationConfiguration") if isinstance(body, dict) else None
    if not isinstance(config, dict) or not config:
        raise UpstreamError(
            f"Destination '{name}' returned no configuration",
            detail=body,
            stage=TriggerStage.LOAD_DESTINATION_CONFIG,
        )

    url = _lookup(config, "url")
    if not url:
        raise ConfigurationError(
            f"Destination '{name}' has no URL configured",
            stage=TriggerStage.LOAD_DESTINATION_CONFIG,
        )
    destination = DestinationConfiguration(
        name=name,
        url=url,
        client_id=_lookup(config, "clientId", "client_id"),
        client_secret=_lookup(config, "clientSecret", "client_secret"),
        token_service_url=_lookup(config, "tokenServiceURL", "token_service_url", "tokenUrl"),
    )
    if not (destination.client_id and destination.client_secret and destination.token_service_url):
        raise ConfigurationError(
            f"Destination '{name}' has an incomplete OAuth client configuration",
            stage=TriggerStage.LOAD_DESTINATION_CONFIG,
        )
    return destination


def _credentials_from_vcap(raw: str, label: str) -> dict[str, Any] | None:
    if not raw.strip():
        return None
    try:
        services = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"VCAP_SERVICES is not valid JSON: {exc}",
            stage=TriggerStage.RESOLVE_DESTINATION,
        ) from exc
    if not isinstance(services, dict):
        return None
    for instance in services.get(label) or []:
        credentials = instance.get("credentials") if isinstance(instance, dict) else None
        if isinstance(credentials, dict):
            return credentials
    return None


def _lookup(config: dict[str, Any], *names: str) -> str:
    wanted = {name.lower() for name in names}
    for key, value in config.items():
        if key.lower() in wanted and value:
            return str(value)
    return ""
