import httpx

from docflow.exceptions import UpstreamError
from docflow.net.response_body import error_message, read_response_body
from docflow.workflow.models import TriggerStage


def join_url(base: str, path: str) -> str:
    """Join ``base`` and ``path`` with exactly one slash between them."""
    if not path:
        return base
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def fetch_client_credentials_token(
    client: httpx.Client,
    *,
    token_url: str,
    client_id: str,
    client_secret: str,
    stage: TriggerStage,
) -> str:
    """Run an OAuth2 client-credentials grant and return the access token.

    The client authenticates with HTTP Basic, as token services bound through
    the destination directory expect.

    Raises:
        UpstreamError: on transport failure, non-2xx, or a reply with no token.
    """
    try:
        response = client.post(
            token_url,
            data={"grant_type": "client_credentials", "client_id": client_id},
            auth=httpx.BasicAuth(client_id, client_secret),
            headers={"Accept": "application/json"},
        )
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Token request failed: {exc}", status_code=502, stage=stage) from exc

    _, body = read_response_body(response)
    if not response.is_success:
        raise UpstreamError(
            error_message(body, f"Token request failed with status {response.status_code}"),
            status_code=response.status_code,
            detail=body,
            stage=stage,
        )
    token = body.get("access_token") if isinstance(body, dict) else None
    if not token:
        raise UpstreamError("Token response did not contain an access_token", detail=body, stage=stage)
    return str(token)
