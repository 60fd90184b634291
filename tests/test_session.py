"""Tests for the per-viewer upload session."""

import pytest

import session as session_module
from errors import DecodeError, NoValidDataError, UploadInProgressError
from session import AgeDistributionSession
from source import DEFAULT_AGES, DefaultSource, UploadedSource
from utils.config_parser import Config
from utils.logger import setup_logging


@pytest.fixture
def sess(default_config, fixed_clock):
    return AgeDistributionSession(config=default_config, clock=fixed_clock)


def test_starts_on_default_sample(sess):
    assert isinstance(sess.active, DefaultSource)
    assert sess.summary().total == len(DEFAULT_AGES)
    assert not sess.busy


def test_successful_upload_becomes_active(sess, ages_workbook):
    outcome = sess.upload("klasse.xlsx", ages_workbook)

    assert outcome.accepted
    assert outcome.notice is None
    assert outcome.sample_count == 3
    assert isinstance(sess.active, UploadedSource)
    assert sess.active.file_name == "klasse.xlsx"
    assert sess.summary().total == 3
    assert sess.summary().mean == pytest.approx(25 / 3)


def test_no_valid_data_keeps_default(sess, empty_ages_workbook, default_config):
    before = sess.active

    outcome = sess.upload("tom.xlsx", empty_ages_workbook)

    assert not outcome.accepted
    assert isinstance(outcome.error, NoValidDataError)
    assert outcome.notice == default_config.display["no_valid_data_notice"]
    assert sess.active is before
    assert sess.summary().total == 34


def test_failed_upload_keeps_previous_upload(sess, ages_workbook, empty_ages_workbook):
    sess.upload("klasse.xlsx", ages_workbook)
    previous = sess.active

    outcome = sess.upload("tom.xlsx", empty_ages_workbook)

    assert not outcome.accepted
    assert sess.active is previous
    assert sess.summary().total == 3


def test_decode_error_notice(sess, default_config):
    outcome = sess.upload("notat.txt", b"hei hei")

    assert not outcome.accepted
    assert isinstance(outcome.error, DecodeError)
    assert outcome.notice == default_config.display["decode_error_notice"]
    assert isinstance(sess.active, DefaultSource)
    assert not sess.busy


def test_reentrant_upload_is_refused(sess, ages_workbook, monkeypatch):
    def reentrant(*args, **kwargs):
        assert sess.busy
        return sess.upload("andre.xlsx", ages_workbook)

    monkeypatch.setattr(session_module, "handle_upload", reentrant)

    with pytest.raises(UploadInProgressError):
        sess.upload("klasse.xlsx", ages_workbook)

    assert not sess.busy
    assert isinstance(sess.active, DefaultSource)


def test_reset_returns_to_default(sess, ages_workbook):
    sess.upload("klasse.xlsx", ages_workbook)
    sess.reset()
    assert isinstance(sess.active, DefaultSource)


def test_upload_log_records_every_attempt(sess, ages_workbook, empty_ages_workbook):
    sess.upload("klasse.xlsx", ages_workbook)
    sess.upload("tom.xlsx", empty_ages_workbook)
    sess.upload("notat.txt", b"hei")

    frame = sess.uploads.to_frame()

    assert frame["file_name"].tolist() == ["klasse.xlsx", "tom.xlsx", "notat.txt"]
    assert frame["outcome"].tolist() == ["accepted", "NoValidDataError", "DecodeError"]
    assert frame["sample_count"].tolist() == [3, 0, 0]
    assert set(frame["active_source"]) == {"upload"}
    assert frame["timestamp"].iloc[0] == "05.03.2024 14:30:00"


def test_create_session_from_config_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    log_file = tmp_path / "agestats.log"
    config_path.write_text(
        "display:\n  people_unit: elever\n"
        f"logging:\n  level: DEBUG\n  log_file: {log_file.as_posix()}\n",
        encoding="utf-8",
    )

    created = session_module.create_session(config_path)

    assert created.config.display["people_unit"] == "elever"
    assert isinstance(created.active, DefaultSource)
    assert log_file.exists()

    setup_logging(level="INFO")


def test_chart_data_uses_configured_label_format(ages_workbook, fixed_clock):
    config = Config({"display": {"label_format": "{age} years"}})
    sess = AgeDistributionSession(config=config, clock=fixed_clock)

    assert sess.chart_frame()["label"].tolist()[0] == "6 years"

    sess.upload("klasse.xlsx", ages_workbook)
    records = sess.chart_records()

    assert [r["label"] for r in records] == ["5 years", "8 years", "12 years"]
    assert [r["count"] for r in records] == [1, 1, 1]
