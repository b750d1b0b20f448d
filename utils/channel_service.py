"""Test stored channels and record the outcome on their rows."""

import logging
import time

from orm.functions import get_channel, get_channel_tokens, update_channel_from_summary, update_channel_test_result
from utils.channel_testing.aggregator import test_channel_tokens
from utils.channel_testing.exceptions import ChannelNotFoundError
from utils.channel_testing.models import ChannelToken, ProbeResult, TokenTestSummary
from utils.channel_testing.probe import Fetcher, elapsed_ms_since, fetch_channel_models

logger = logging.getLogger(__name__)


def collect_channel_tokens(channel) -> list[ChannelToken]:
    """Keys to test for a channel, falling back to its legacy single api_key."""
    tokens = get_channel_tokens(channel.id)
    if tokens:
        return tokens
    if channel.api_key:
        return [ChannelToken(api_key=channel.api_key)]
    return []


def _log_model_changes(channel, models: list[str]) -> None:
    previous = channel.models
    added = [model for model in models if model not in previous]
    removed = [model for model in previous if model not in models]
    if added or removed:
        logger.info(f"Channel {channel.id} models changed: added {added}, removed {removed}")


def test_channel(channel_id: str, fetcher: Fetcher = fetch_channel_models) -> TokenTestSummary:
    """Probe every key of a stored channel and persist the aggregated status.

    Raises:
        ChannelNotFoundError: if no channel has this id.
    """
    channel = get_channel(channel_id)
    if channel is None:
        raise ChannelNotFoundError(channel_id)

    tokens = collect_channel_tokens(channel)
    if not tokens:
        logger.warning(f"Channel {channel_id} has no API keys to test")

    summary = test_channel_tokens(channel.base_url, tokens, fetcher=fetcher)
    if summary.ok:
        _log_model_changes(channel, summary.models)
    update_channel_from_summary(channel_id, summary)
    return summary


def test_channel_key(channel_id: str, api_key: str, fetcher: Fetcher = fetch_channel_models) -> ProbeResult:
    """Probe a stored channel with a single key and persist the result.

    Models are only written when the probe succeeded. A transport failure is
    recorded as an error and returned as a failed result.
    """
    channel = get_channel(channel_id)
    if channel is None:
        raise ChannelNotFoundError(channel_id)

    start = time.perf_counter()
    try:
        result = fetcher(channel.base_url, api_key)
    except Exception:
        logger.exception(f"Single-key test of channel {channel_id} could not reach {channel.base_url}")
        result = ProbeResult(ok=False, elapsed_ms=elapsed_ms_since(start))

    if result.ok:
        update_channel_test_result(channel_id, True, result.elapsed_ms, models=result.models)
    else:
        update_channel_test_result(channel_id, False, result.elapsed_ms)
    return result
