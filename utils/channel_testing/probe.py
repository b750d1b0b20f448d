"""Single `/v1/models` probe against an OpenAI-compatible upstream."""

import logging
import time
from typing import Callable

import requests

from utils.channel_models import normalize_models_input
from utils.channel_testing.models import ProbeResult
from utils.config_helper import get_probe_timeout
from utils.url import normalize_base_url

logger = logging.getLogger(__name__)

# (base_url, api_key) -> ProbeResult
Fetcher = Callable[[str, str], ProbeResult]


def build_headers(api_key: str) -> dict[str, str]:
    """Send the key both ways; upstreams expect either a bearer token or `x-api-key`."""
    return {
        "Authorization": f"Bearer {api_key}",
        "x-api-key": api_key,
        "Content-Type": "application/json",
    }


def elapsed_ms_since(start: float) -> int:
    return max(0, int(round((time.perf_counter() - start) * 1000)))


def fetch_channel_models(
    base_url: str,
    api_key: str,
    *,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> ProbeResult:
    """List the models an upstream exposes to `api_key`.

    Args:
        base_url: Upstream base URL, with or without a trailing `/v1`.
        api_key: Key sent as bearer token and as `x-api-key`.
        session: Optional requests session to issue the call on.
        timeout: Transport timeout in seconds, defaults to the configured probe timeout.

    Returns:
        ProbeResult with ok=False on a non-2xx status. A 2xx body that is not JSON
        is treated as an empty model list, not as a failure.

    Raises:
        requests.RequestException: on transport failures (DNS, connection, timeout).
    """
    target = f"{normalize_base_url(base_url)}/v1/models"
    if timeout is None:
        timeout = get_probe_timeout()

    http = session if session is not None else requests
    start = time.perf_counter()
    try:
        # stream=True returns once headers are in, the body is read below
        response = http.get(target, headers=build_headers(api_key), timeout=timeout, stream=True)
    except requests.RequestException as e:
        logger.debug(f"Probe {target} unreachable after {elapsed_ms_since(start)}ms: {type(e).__name__}")
        raise
    elapsed = elapsed_ms_since(start)

    with response:
        # 2xx only; requests treats every status below 400 as ok
        if not 200 <= response.status_code < 300:
            logger.debug(f"Probe {target} rejected with HTTP {response.status_code} in {elapsed}ms")
            return ProbeResult(ok=False, elapsed_ms=elapsed, models=[])

        try:
            payload = response.json()
        except ValueError:
            logger.debug(f"Probe {target} returned a non-JSON body, assuming no models")
            payload = {"data": []}

    if isinstance(payload, list):
        descriptors = payload
    elif isinstance(payload, dict) and payload.get("data") is not None:
        descriptors = payload["data"]
    else:
        descriptors = payload

    models = normalize_models_input(descriptors)
    logger.debug(f"Probe {target} ok in {elapsed}ms with {len(models)} models")
    return ProbeResult(ok=True, elapsed_ms=elapsed, models=models, raw_payload=payload)
