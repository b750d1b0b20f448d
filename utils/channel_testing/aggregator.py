"""Run the probe once per channel token and fold the results into one summary."""

import logging
import math
import time
from typing import Any, Mapping, Sequence

from utils.channel_testing.models import ChannelToken, ProbeResult, TokenTestItem, TokenTestSummary
from utils.channel_testing.probe import Fetcher, elapsed_ms_since, fetch_channel_models

logger = logging.getLogger(__name__)


def _as_token(token: ChannelToken | Mapping[str, Any]) -> ChannelToken:
    if isinstance(token, ChannelToken):
        return token
    return ChannelToken.model_validate(token)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _probe(fetcher: Fetcher, base_url: str, token: ChannelToken) -> ProbeResult:
    """Call the fetcher, turning a raised fault into a failed result for this token."""
    start = time.perf_counter()
    try:
        return fetcher(base_url, token.api_key)
    except Exception:
        logger.exception(f"Probe raised for token {token.name or token.id or '<unnamed>'}, counting it as failed")
        return ProbeResult(ok=False, elapsed_ms=elapsed_ms_since(start), models=[])


def test_channel_tokens(
    base_url: str,
    tokens: Sequence[ChannelToken | Mapping[str, Any]],
    fetcher: Fetcher = fetch_channel_models,
) -> TokenTestSummary:
    """Test a channel's models with each of its API keys and aggregate the results.

    Tokens are probed one at a time, in the given order.

    Args:
        base_url: Upstream base URL.
        tokens: Tokens to test, as ChannelToken or mappings with id/name/api_key.
        fetcher: Probe to run per token, replaceable in tests.

    Returns:
        Summary that is ok when at least one token works. Its model list is the
        de-duplicated union of what the working tokens reported.
    """
    if not tokens:
        return TokenTestSummary.empty()

    items: list[TokenTestItem] = []
    # dict keeps first-seen order
    seen_models: dict[str, None] = {}
    success = 0
    total_elapsed = 0

    # validate every token before any request goes out
    tokens = [_as_token(token) for token in tokens]

    for token in tokens:
        result = _probe(fetcher, base_url, token)
        total_elapsed += result.elapsed_ms
        if result.ok:
            success += 1
            for model in result.models:
                seen_models.setdefault(model, None)
        else:
            logger.warning(f"Token {token.name or token.id or '<unnamed>'} failed against {base_url}")

        items.append(
            TokenTestItem(
                token_id=token.id,
                token_name=token.name,
                ok=result.ok,
                elapsed_ms=result.elapsed_ms,
                models=list(result.models),
            )
        )

    total = len(items)
    summary = TokenTestSummary(
        ok=success > 0,
        total=total,
        success=success,
        failed=total - success,
        elapsed_ms=_round_half_up(total_elapsed / total),
        models=list(seen_models),
        items=items,
    )
    logger.info(
        f"Tested {total} token(s) against {base_url}: {success} ok, {summary.failed} failed, "
        f"avg {summary.elapsed_ms}ms, {len(summary.models)} models"
    )
    return summary
