import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from orm.models import Channel, ChannelTokenRow, SessionLocal
from utils.channel_models import models_to_json
from utils.channel_testing.models import ChannelToken, TokenTestSummary
from utils.enums import ChannelStatus
from utils.time_utils import now_epoch, now_iso

logger = logging.getLogger(__name__)

# Two fixed statements: a run without model data must not clear the stored list
UPDATE_TEST_RESULT_WITH_MODELS = text(
    "UPDATE channels SET status = :status, models_json = :models_json, test_time = :test_time, "
    "response_time_ms = :response_time_ms, updated_at = :updated_at WHERE id = :id"
)
UPDATE_TEST_RESULT = text(
    "UPDATE channels SET status = :status, test_time = :test_time, "
    "response_time_ms = :response_time_ms, updated_at = :updated_at WHERE id = :id"
)


def get_channel(channel_id: str) -> Channel | None:
    with SessionLocal() as session:
        return session.query(Channel).filter(Channel.id == channel_id).one_or_none()


def get_channel_tokens(channel_id: str) -> list[ChannelToken]:
    """Return a channel's keys in the order they were added."""
    with SessionLocal() as session:
        rows = (
            session.query(ChannelTokenRow)
            .filter(ChannelTokenRow.channel_id == channel_id)
            .order_by(ChannelTokenRow.created_at, ChannelTokenRow.id)
            .all()
        )
        return [ChannelToken(id=row.id, name=row.name, api_key=row.api_key) for row in rows]


def update_channel_test_result(
    channel_id: str,
    ok: bool,
    elapsed_ms: int,
    models: list[str] | None = None,
    models_json: str | None = None,
) -> int:
    """
    Write the outcome of a channel test to its row.

    Args:
        channel_id: Channel to update.
        ok: Whether the test succeeded; sets status to active or error.
        elapsed_ms: Response time to record.
        models: Model IDs to store, serialized with models_to_json.
        models_json: Already serialized model list, takes precedence over models.

    Returns:
        int: Number of rows matched, 0 for an unknown channel.

    When neither models nor models_json is given, models_json is left as it was.
    """
    if models_json is None and models is not None:
        models_json = models_to_json(models)

    params = {
        "status": ChannelStatus.ACTIVE.value if ok else ChannelStatus.ERROR.value,
        "test_time": now_epoch(),
        "response_time_ms": elapsed_ms,
        "updated_at": now_iso(),
        "id": channel_id,
    }
    if models_json:
        statement = UPDATE_TEST_RESULT_WITH_MODELS
        params["models_json"] = models_json
    else:
        statement = UPDATE_TEST_RESULT

    try:
        with SessionLocal() as session:
            matched = session.execute(statement, params).rowcount
            session.commit()
    except SQLAlchemyError:
        logger.exception(f"Error saving test result for channel {channel_id}")
        raise

    if matched == 0:
        logger.warning(f"No channel {channel_id} to save test result to")
    else:
        logger.info(f"Channel {channel_id} marked {params['status']} ({elapsed_ms}ms)")
    return matched


def update_channel_from_summary(channel_id: str, summary: TokenTestSummary) -> int:
    # a run where every token failed fetched no models; keep the stored list
    models = summary.models if summary.ok else None
    return update_channel_test_result(channel_id, summary.ok, summary.elapsed_ms, models=models)
