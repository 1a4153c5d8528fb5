"""Conversion between osu! API v1 responses and :class:`Beatmap`.

The v1 ``get_beatmaps`` endpoint returns every value as a string (or null),
with dates formatted as ``YYYY-MM-DD HH:MM:SS`` in UTC and booleans as
``"1"``/``"0"``.
"""

from __future__ import annotations

from datetime import UTC, datetime

from beatcache.core.model import Beatmap, RankedStatus, utcnow

OsuApiBeatmap = dict[str, str | None]

# osu!standard is the only game mode served
SUPPORTED_MODE = "0"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_supported(response: OsuApiBeatmap) -> bool:
    """Whether an API entry is an osu!standard beatmap."""
    return response.get("mode", SUPPORTED_MODE) == SUPPORTED_MODE


def parse_api_date(value: str) -> datetime:
    return datetime.strptime(value, _DATE_FORMAT).replace(tzinfo=UTC)


def format_api_date(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime(_DATE_FORMAT)


def _optional_float(value: str | None) -> float | None:
    return float(value) if value else None


def _optional_str(value: float | int | None) -> str | None:
    return None if value is None else str(value)


def _flag(value: str | None) -> bool:
    return value == "1"


def beatmap_from_api_response(response: OsuApiBeatmap) -> Beatmap:
    """Convert an osu! API entry into a beatmap ready for insertion.

    Raises:
        KeyError, ValueError: if a required field is missing or malformed.
    """

    def required(key: str) -> str:
        value = response[key]
        if value is None:
            raise ValueError(f"Missing value for {key!r}")
        return value

    approved_date = response.get("approved_date")
    max_combo = response.get("max_combo")

    return Beatmap(
        beatmap_id=int(required("beatmap_id")),
        beatmapset_id=int(required("beatmapset_id")),
        file_md5=required("file_md5"),
        approved=RankedStatus(int(required("approved"))),
        last_checked=utcnow(),
        max_combo=int(max_combo) if max_combo is not None else None,
        submit_date=parse_api_date(required("submit_date")),
        approved_date=parse_api_date(approved_date) if approved_date else None,
        last_update=parse_api_date(required("last_update")),
        artist=required("artist"),
        title=required("title"),
        version=required("version"),
        source=response.get("source") or "",
        tags=response.get("tags") or "",
        creator=required("creator"),
        creator_id=int(required("creator_id")),
        bpm=float(required("bpm")),
        difficultyrating=_optional_float(response.get("difficultyrating")),
        diff_aim=_optional_float(response.get("diff_aim")),
        diff_speed=_optional_float(response.get("diff_speed")),
        diff_size=float(required("diff_size")),
        diff_overall=float(required("diff_overall")),
        diff_approach=float(required("diff_approach")),
        diff_drain=float(required("diff_drain")),
        hit_length=int(required("hit_length")),
        total_length=int(required("total_length")),
        genre_id=int(response.get("genre_id") or 0),
        language_id=int(response.get("language_id") or 0),
        favourite_count=int(response.get("favourite_count") or 0),
        rating=float(response.get("rating") or 0),
        playcount=int(response.get("playcount") or 0),
        passcount=int(response.get("passcount") or 0),
        count_normal=int(required("count_normal")),
        count_slider=int(required("count_slider")),
        count_spinner=int(required("count_spinner")),
        storyboard=_flag(response.get("storyboard")),
        video=_flag(response.get("video")),
        download_unavailable=_flag(response.get("download_unavailable")),
        audio_unavailable=_flag(response.get("audio_unavailable")),
        packs=response.get("packs"),
    )


def beatmap_to_api_response(beatmap: Beatmap) -> OsuApiBeatmap:
    """Render a beatmap in the osu! API v1 response shape."""
    return {
        "approved": str(int(beatmap.approved)),
        "submit_date": format_api_date(beatmap.submit_date),
        "approved_date": (
            format_api_date(beatmap.approved_date) if beatmap.approved_date else None
        ),
        "last_update": format_api_date(beatmap.last_update),
        "artist": beatmap.artist,
        "beatmap_id": str(beatmap.beatmap_id),
        "beatmapset_id": str(beatmap.beatmapset_id),
        "bpm": str(beatmap.bpm),
        "creator": beatmap.creator,
        "creator_id": str(beatmap.creator_id),
        "difficultyrating": _optional_str(beatmap.difficultyrating),
        "diff_aim": _optional_str(beatmap.diff_aim),
        "diff_speed": _optional_str(beatmap.diff_speed),
        "diff_size": str(beatmap.diff_size),
        "diff_overall": str(beatmap.diff_overall),
        "diff_approach": str(beatmap.diff_approach),
        "diff_drain": str(beatmap.diff_drain),
        "hit_length": str(beatmap.hit_length),
        "source": beatmap.source,
        "genre_id": str(beatmap.genre_id),
        "language_id": str(beatmap.language_id),
        "title": beatmap.title,
        "total_length": str(beatmap.total_length),
        "version": beatmap.version,
        "file_md5": beatmap.file_md5,
        "mode": SUPPORTED_MODE,
        "tags": beatmap.tags,
        "favourite_count": str(beatmap.favourite_count),
        "rating": str(beatmap.rating),
        "playcount": str(beatmap.playcount),
        "passcount": str(beatmap.passcount),
        "count_normal": str(beatmap.count_normal),
        "count_slider": str(beatmap.count_slider),
        "count_spinner": str(beatmap.count_spinner),
        "max_combo": _optional_str(beatmap.max_combo),
        "storyboard": "1" if beatmap.storyboard else "0",
        "video": "1" if beatmap.video else "0",
        "download_unavailable": "1" if beatmap.download_unavailable else "0",
        "audio_unavailable": "1" if beatmap.audio_unavailable else "0",
        "packs": beatmap.packs,
    }
