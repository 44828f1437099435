import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.services.release_validation import (
    earliest_release_date,
    failed_checks,
    run_submission_checklist,
    splits_complete,
    splits_total,
    validate_artwork,
    validate_audio,
)

TODAY = datetime.date(2025, 3, 1)


def make_release(**overrides):
    fields = dict(
        title="Full Release",
        artist_id="artist-1",
        type="SINGLE",
        primary_genre="Electronic",
        release_date=datetime.datetime(2025, 3, 11, 12, 0),
        artwork_url="https://storage.local/artwork/cover.png",
        territories=["WW"],
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_track(index=1, audio_url="https://storage.local/audio/song.wav"):
    return SimpleNamespace(track_index=index, audio_url=audio_url)


def make_split(percent):
    return SimpleNamespace(percent=Decimal(percent))


def check(results, check_id):
    return next(r for r in results if r.id == check_id)


def test_complete_release_passes_every_check():
    results = run_submission_checklist(make_release(), [make_track()], [make_split("100")], today=TODAY, lead_days=5)

    assert [r.id for r in results] == ["basic-info", "tracks", "artwork", "territories", "splits", "release-date"]
    assert all(r.passed for r in results)
    assert failed_checks(results) == []


def test_release_without_tracks_or_artwork_reports_both():
    results = run_submission_checklist(
        make_release(artwork_url=None), [], [make_split("100")], today=TODAY, lead_days=5
    )

    assert {e["id"] for e in failed_checks(results)} == {"tracks", "artwork"}


def test_every_failing_check_is_reported_at_once():
    release = make_release(primary_genre=None, release_date=None, artwork_url="", territories=[])
    results = run_submission_checklist(release, [], [], today=TODAY, lead_days=5)

    assert {e["id"] for e in failed_checks(results)} == {
        "basic-info", "tracks", "artwork", "territories", "splits", "release-date",
    }
    assert "primary_genre" in check(results, "basic-info").message


def test_track_without_audio_fails_tracks_check():
    results = run_submission_checklist(
        make_release(), [make_track(1), make_track(2, audio_url=None)], [make_split("100")],
        today=TODAY, lead_days=5,
    )

    tracks = check(results, "tracks")
    assert not tracks.passed
    assert tracks.message == "Tracks without audio: 2"


@pytest.mark.parametrize("percents, passed", [
    (["99.99"], False),
    (["100.01"], False),
    (["100.00"], True),
    (["60", "40"], True),
    (["33.33", "33.33", "33.33"], False),
    (["33.33", "33.33", "33.34"], True),
])
def test_splits_must_total_exactly_one_hundred(percents, passed):
    results = run_submission_checklist(
        make_release(), [make_track()], [make_split(p) for p in percents], today=TODAY, lead_days=5
    )

    assert check(results, "splits").passed is passed


def test_splits_total_uses_two_decimal_precision():
    assert splits_total(["50.005", "49.995"]) == Decimal("100.00")
    assert splits_complete([Decimal("70"), Decimal("30")])
    assert not splits_complete([])


@pytest.mark.parametrize("release_date, passed", [
    (datetime.datetime(2025, 3, 6, 0, 0), True),     # today + 5 days
    (datetime.datetime(2025, 3, 5, 23, 59), False),  # one minute short of the fifth day
    (datetime.datetime(2025, 3, 1, 12, 0), False),
])
def test_release_date_lead_time(release_date, passed):
    results = run_submission_checklist(
        make_release(release_date=release_date), [make_track()], [make_split("100")], today=TODAY, lead_days=5
    )

    assert check(results, "release-date").passed is passed


def test_release_date_is_compared_in_utc():
    # 01:00 on March 6th in UTC+3 is still March 5th in UTC
    kyiv = datetime.timezone(datetime.timedelta(hours=3))
    release_date = datetime.datetime(2025, 3, 6, 1, 0, tzinfo=kyiv)
    results = run_submission_checklist(
        make_release(release_date=release_date), [make_track()], [make_split("100")], today=TODAY, lead_days=5
    )

    assert not check(results, "release-date").passed
    assert earliest_release_date(TODAY, 5) == datetime.date(2025, 3, 6)


def test_valid_artwork_has_no_errors():
    assert validate_artwork(filename="cover.png", content_type="image/png", size=5_000_000, width=3000, height=3000) == []
    assert validate_artwork(filename="cover.JPG", content_type=None, size=1, width=3000, height=3000) == []


def test_artwork_reports_every_broken_rule():
    errors = validate_artwork(filename="cover.gif", content_type="image/gif", size=11 * 1024 * 1024, width=2999, height=3000)

    assert [e["id"] for e in errors] == ["artwork-format", "artwork-size", "artwork-dimensions"]
    assert "2999x3000" in errors[2]["message"]


def test_audio_must_be_wav_under_limit():
    assert validate_audio(filename="song.wav", content_type="audio/wav", size=100 * 1024 * 1024) == []
    assert validate_audio(filename="song.WAV", content_type="application/octet-stream", size=10) == []

    errors = validate_audio(filename="song.mp3", content_type="audio/mpeg", size=100 * 1024 * 1024 + 1)
    assert [e["id"] for e in errors] == ["audio-format", "audio-size"]

    flac = validate_audio(filename="song.flac", content_type="audio/flac", size=10)
    assert [e["id"] for e in flac] == ["audio-format"]
