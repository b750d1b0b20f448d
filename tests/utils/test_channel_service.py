import logging

import pytest
import requests

from orm.models import Channel, ChannelTokenRow
from utils import channel_service
from utils.channel_testing.exceptions import ChannelNotFoundError
from utils.channel_testing.models import ProbeResult


def _seed(session_factory, api_key=None, tokens=(), models_json='["cached"]'):
    with session_factory() as session:
        session.add(
            Channel(
                id="ch-1",
                name="Upstream",
                base_url="https://api.example.com/",
                api_key=api_key,
                status="active",
                models_json=models_json,
            )
        )
        for index, (name, key) in enumerate(tokens):
            session.add(
                ChannelTokenRow(
                    id=f"t{index}",
                    channel_id="ch-1",
                    name=name,
                    api_key=key,
                    created_at=f"2023-01-0{index + 1}T00:00:00Z",
                )
            )
        session.commit()


def _row(session_factory):
    with session_factory() as session:
        return session.get(Channel, "ch-1")


class RecordingFetcher:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def __call__(self, base_url, api_key):
        self.calls.append((base_url, api_key))
        outcome = self.outcomes[api_key]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_channel_tokens_are_tested_and_persisted(channel_db, fixed_clock):
    _seed(channel_db, tokens=[("main", "k1"), ("backup", "k2")])
    fetcher = RecordingFetcher(
        {
            "k1": ProbeResult(ok=True, elapsed_ms=100, models=["gpt-4"]),
            "k2": ProbeResult(ok=False, elapsed_ms=300),
        }
    )

    summary = channel_service.test_channel("ch-1", fetcher=fetcher)

    assert [key for _, key in fetcher.calls] == ["k1", "k2"]
    assert summary.ok is True
    assert [item.token_name for item in summary.items] == ["main", "backup"]
    row = _row(channel_db)
    assert row.status == "active"
    assert row.response_time_ms == 200
    assert row.models_json == '["gpt-4"]'
    assert row.test_time == fixed_clock["test_time"]


def test_legacy_channel_key_is_used_without_token_rows(channel_db, fixed_clock):
    _seed(channel_db, api_key="legacy-key")
    fetcher = RecordingFetcher({"legacy-key": ProbeResult(ok=True, elapsed_ms=20, models=["m"])})

    summary = channel_service.test_channel("ch-1", fetcher=fetcher)

    assert fetcher.calls == [("https://api.example.com/", "legacy-key")]
    assert summary.total == 1
    assert summary.items[0].token_id is None


def test_channel_without_keys_is_marked_error(channel_db, fixed_clock):
    _seed(channel_db)
    fetcher = RecordingFetcher({})

    summary = channel_service.test_channel("ch-1", fetcher=fetcher)

    assert summary.total == 0
    assert fetcher.calls == []
    row = _row(channel_db)
    assert row.status == "error"
    assert row.response_time_ms == 0
    assert row.models_json == '["cached"]'


def test_unknown_channel_raises(channel_db):
    with pytest.raises(ChannelNotFoundError):
        channel_service.test_channel("missing", fetcher=RecordingFetcher({}))
    with pytest.raises(ChannelNotFoundError):
        channel_service.test_channel_key("missing", "k", fetcher=RecordingFetcher({}))


def test_single_key_success_stores_models(channel_db, fixed_clock):
    _seed(channel_db)
    fetcher = RecordingFetcher({"k": ProbeResult(ok=True, elapsed_ms=33, models=["a", "a", "b"])})

    result = channel_service.test_channel_key("ch-1", "k", fetcher=fetcher)

    assert result.ok is True
    row = _row(channel_db)
    assert row.status == "active"
    assert row.response_time_ms == 33
    assert row.models_json == '["a","b"]'


def test_single_key_rejection_keeps_models(channel_db, fixed_clock):
    _seed(channel_db)
    fetcher = RecordingFetcher({"k": ProbeResult(ok=False, elapsed_ms=80)})

    channel_service.test_channel_key("ch-1", "k", fetcher=fetcher)

    row = _row(channel_db)
    assert row.status == "error"
    assert row.response_time_ms == 80
    assert row.models_json == '["cached"]'


def test_single_key_unreachable_upstream_is_recorded_as_error(channel_db, fixed_clock):
    _seed(channel_db)
    fetcher = RecordingFetcher({"k": requests.ConnectTimeout("timed out")})

    result = channel_service.test_channel_key("ch-1", "k", fetcher=fetcher)

    assert result.ok is False
    assert result.models == []
    row = _row(channel_db)
    assert row.status == "error"
    assert row.models_json == '["cached"]'


def test_model_changes_against_stored_list_are_logged(channel_db, fixed_clock, caplog):
    _seed(channel_db, api_key="k", models_json='["cached", "gpt-4"]')
    fetcher = RecordingFetcher({"k": ProbeResult(ok=True, elapsed_ms=5, models=["gpt-4", "gpt-4o"])})

    with caplog.at_level(logging.INFO, logger="utils.channel_service"):
        channel_service.test_channel("ch-1", fetcher=fetcher)

    assert "added ['gpt-4o'], removed ['cached']" in caplog.text


def test_unchanged_models_are_not_logged(channel_db, fixed_clock, caplog):
    _seed(channel_db, api_key="k", models_json='["gpt-4"]')
    fetcher = RecordingFetcher({"k": ProbeResult(ok=True, elapsed_ms=5, models=["gpt-4"])})

    with caplog.at_level(logging.INFO, logger="utils.channel_service"):
        channel_service.test_channel("ch-1", fetcher=fetcher)

    assert "models changed" not in caplog.text
