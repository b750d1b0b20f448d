"""Channel testing: probe an upstream's model list with each of a channel's keys."""

from utils.channel_testing.aggregator import test_channel_tokens
from utils.channel_testing.exceptions import ChannelNotFoundError, ChannelTestingError
from utils.channel_testing.models import ChannelToken, ProbeResult, TokenTestItem, TokenTestSummary
from utils.channel_testing.probe import Fetcher, fetch_channel_models

__all__ = [
    "fetch_channel_models",
    "test_channel_tokens",
    "Fetcher",
    "ChannelToken",
    "ProbeResult",
    "TokenTestItem",
    "TokenTestSummary",
    "ChannelTestingError",
    "ChannelNotFoundError",
]
