"""Release validity rules.

The submission checklist runs six independent checks and reports every one of
them, so the UI can show the full list and ``submit`` can reject with all
failures at once. Artwork and audio rules run when a file reference is handed
out or attached, never at submission time.
"""

from __future__ import annotations

import datetime
import os
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from app.core.config import settings

SPLIT_TOTAL = Decimal("100.00")
_CENT = Decimal("0.01")

ARTWORK_DIMENSION_PX = 3000
MAX_ARTWORK_BYTES = 10 * 1024 * 1024
ARTWORK_MEDIA_TYPES = ("image/jpeg", "image/png")
ARTWORK_EXTENSIONS = (".jpg", ".jpeg", ".png")

MAX_AUDIO_BYTES = 100 * 1024 * 1024
AUDIO_MEDIA_TYPES = ("audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave")
AUDIO_EXTENSIONS = (".wav",)


@dataclass(frozen=True, slots=True)
class CheckResult:
    id: str
    label: str
    passed: bool
    message: str = ""

    def as_error(self) -> dict[str, str]:
        return {"id": self.id, "message": self.message or self.label}


def splits_total(percents: Iterable) -> Decimal:
    total = sum((Decimal(str(p)) for p in percents), Decimal("0"))
    return total.quantize(_CENT, rounding=ROUND_HALF_UP)


def splits_complete(percents: Iterable) -> bool:
    """True when the percentages add up to exactly 100 at two-decimal precision."""
    return splits_total(percents) == SPLIT_TOTAL


def _as_utc_date(value: datetime.datetime | datetime.date) -> datetime.date:
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.date()
    return value


def earliest_release_date(today: Optional[datetime.date] = None, lead_days: Optional[int] = None) -> datetime.date:
    today = today or datetime.datetime.now(datetime.timezone.utc).date()
    lead_days = settings.RELEASE_LEAD_DAYS if lead_days is None else lead_days
    return today + datetime.timedelta(days=lead_days)


def run_submission_checklist(
    release,
    tracks: Sequence,
    splits: Sequence,
    *,
    today: Optional[datetime.date] = None,
    lead_days: Optional[int] = None,
) -> list[CheckResult]:
    lead_days = settings.RELEASE_LEAD_DAYS if lead_days is None else lead_days
    results = []

    missing = [
        name for name in ("title", "artist_id", "type", "primary_genre", "release_date")
        if not getattr(release, name, None)
    ]
    results.append(CheckResult(
        id="basic-info",
        label="Basic release information completed",
        passed=not missing,
        message=f"Missing required fields: {', '.join(missing)}" if missing else "",
    ))

    without_audio = [t.track_index for t in tracks if not t.audio_url]
    if not tracks:
        tracks_message = "At least one track is required"
    elif without_audio:
        tracks_message = f"Tracks without audio: {', '.join(str(i) for i in without_audio)}"
    else:
        tracks_message = ""
    results.append(CheckResult(
        id="tracks",
        label=f"{len(tracks)} track(s) added with audio files",
        passed=not tracks_message,
        message=tracks_message,
    ))

    results.append(CheckResult(
        id="artwork",
        label="Release artwork uploaded",
        passed=bool(release.artwork_url),
        message="" if release.artwork_url else "Artwork is required",
    ))

    results.append(CheckResult(
        id="territories",
        label="Distribution territories selected",
        passed=bool(release.territories),
        message="" if release.territories else "Select at least one territory or worldwide",
    ))

    total = splits_total(s.percent for s in splits)
    results.append(CheckResult(
        id="splits",
        label="Revenue splits total 100%",
        passed=total == SPLIT_TOTAL,
        message="" if total == SPLIT_TOTAL else f"Revenue splits total {total}%, expected 100%",
    ))

    earliest = earliest_release_date(today, lead_days)
    if not release.release_date:
        date_message = "Release date is required"
    elif _as_utc_date(release.release_date) < earliest:
        date_message = f"Release date must be on or after {earliest.isoformat()}"
    else:
        date_message = ""
    results.append(CheckResult(
        id="release-date",
        label=f"Release date is at least {lead_days} days in the future",
        passed=not date_message,
        message=date_message,
    ))

    return results


def failed_checks(results: Iterable[CheckResult]) -> list[dict[str, str]]:
    return [r.as_error() for r in results if not r.passed]


def _extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def validate_artwork(
    *,
    filename: str,
    content_type: Optional[str],
    size: Optional[int],
    width: Optional[int],
    height: Optional[int],
) -> list[dict[str, str]]:
    """Returns every artwork rule the file breaks; an empty list means it is acceptable."""
    errors = []
    if content_type not in ARTWORK_MEDIA_TYPES and _extension(filename) not in ARTWORK_EXTENSIONS:
        errors.append({"id": "artwork-format", "message": "Artwork must be a JPEG or PNG image"})
    if size is None or size > MAX_ARTWORK_BYTES:
        errors.append({"id": "artwork-size", "message": "Artwork file size must be 10MB or less"})
    if width != ARTWORK_DIMENSION_PX or height != ARTWORK_DIMENSION_PX:
        errors.append({
            "id": "artwork-dimensions",
            "message": f"Dimensions must be exactly 3000x3000px (current: {width}x{height}px)",
        })
    return errors


def validate_audio(
    *,
    filename: str,
    content_type: Optional[str],
    size: Optional[int],
) -> list[dict[str, str]]:
    errors = []
    if content_type not in AUDIO_MEDIA_TYPES and _extension(filename) not in AUDIO_EXTENSIONS:
        errors.append({"id": "audio-format", "message": "Only WAV files are supported"})
    if size is None or size > MAX_AUDIO_BYTES:
        errors.append({"id": "audio-size", "message": "Audio file size must be 100MB or less"})
    return errors
