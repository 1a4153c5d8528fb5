"""Minimal .osu decoder used to derive a beatmap's maximum combo.

The osu! API reports ``max_combo`` as null for many unranked beatmaps, so it
is backfilled from the beatmap file instead. Only the sections that affect
combo are decoded: ``[Difficulty]``, ``[TimingPoints]`` and ``[HitObjects]``.

Combo per hit object (osu!standard):
- circle, spinner: 1
- slider: head + ticks on every span + repeats + tail
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from beatcache.core.errors import BeatmapDecodeError

HEADER_PREFIX = "osu file format v"

BASE_SCORING_DISTANCE = 100.0

OBJECT_CIRCLE = 1
OBJECT_SLIDER = 1 << 1
OBJECT_SPINNER = 1 << 3

# Guards against pathological slider definitions
MAX_TICKS_PER_SPAN = 32768


@dataclass
class TimingState:
    """Timing information in effect at a point in time."""

    time: float
    beat_length: float
    slider_velocity: float


@dataclass
class DecodedBeatmap:
    """The combo-relevant subset of a .osu file."""

    format_version: int
    slider_multiplier: float = 1.4
    slider_tick_rate: float = 1.0
    timing: list[TimingState] = field(default_factory=list)
    circles: int = 0
    spinners: int = 0
    slider_combo: int = 0

    @property
    def max_combo(self) -> int:
        return self.circles + self.spinners + self.slider_combo

    def timing_at(self, time: float) -> TimingState:
        if not self.timing:
            return TimingState(time=0, beat_length=1000.0, slider_velocity=1.0)
        times = [t.time for t in self.timing]
        index = bisect.bisect_right(times, time) - 1
        # Objects before the first timing point use it anyway
        return self.timing[max(index, 0)]


def _parse_version(header: str) -> int:
    try:
        return int(header[len(HEADER_PREFIX) :].strip())
    except ValueError as e:
        raise BeatmapDecodeError(f"Invalid format header: {header!r}") from e


def _parse_timing_points(lines: list[str]) -> list[TimingState]:
    raw: list[tuple[float, float, bool]] = []
    for line in lines:
        parts = line.split(",")
        if len(parts) < 2:
            continue
        try:
            time = float(parts[0])
            beat_length = float(parts[1])
        except ValueError as e:
            raise BeatmapDecodeError(f"Invalid timing point: {line!r}") from e
        uninherited = beat_length > 0
        if len(parts) > 6 and parts[6].strip():
            uninherited = parts[6].strip() == "1"
        raw.append((time, beat_length, uninherited))

    # Stable sort keeps file order for points sharing a timestamp
    raw.sort(key=lambda p: p[0])

    states: list[TimingState] = []
    beat_length = 1000.0
    velocity = 1.0
    for time, value, uninherited in raw:
        if uninherited:
            beat_length = min(max(value, 6.0), 60000.0)
            velocity = 1.0
        else:
            velocity = min(max(-100.0 / value, 0.1), 10.0) if value < 0 else 1.0
        if states and states[-1].time == time:
            states[-1] = TimingState(time, beat_length, velocity)
        else:
            states.append(TimingState(time, beat_length, velocity))
    return states


def _slider_combo(beatmap: DecodedBeatmap, time: float, spans: int, length: float) -> int:
    timing = beatmap.timing_at(time)
    scoring_distance = BASE_SCORING_DISTANCE * beatmap.slider_multiplier * timing.slider_velocity
    velocity = scoring_distance / timing.beat_length

    tick_distance = scoring_distance / beatmap.slider_tick_rate if beatmap.slider_tick_rate else 0
    if beatmap.format_version < 8:
        tick_distance /= timing.slider_velocity

    ticks = 0
    if tick_distance > 0 and length > 0:
        min_distance_from_end = velocity * 10
        distance = tick_distance
        while distance <= length and ticks < MAX_TICKS_PER_SPAN:
            if distance >= length - min_distance_from_end:
                break
            ticks += 1
            distance += tick_distance

    # head + ticks per span + repeats + tail
    return 1 + ticks * spans + (spans - 1) + 1


def decode(content: bytes) -> DecodedBeatmap:
    """Decode the combo-relevant sections of a .osu file.

    Raises:
        BeatmapDecodeError: if the content is not a valid .osu file.
    """
    text = content.decode("utf-8-sig", errors="replace")
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith("//")]

    if not lines or not lines[0].startswith(HEADER_PREFIX):
        raise BeatmapDecodeError("Missing .osu format header")

    sections: dict[str, list[str]] = {}
    current: list[str] | None = None
    for line in lines[1:]:
        if line.startswith("[") and line.endswith("]"):
            current = sections.setdefault(line[1:-1], [])
        elif current is not None:
            current.append(line)

    beatmap = DecodedBeatmap(format_version=_parse_version(lines[0]))

    for line in sections.get("Difficulty", []):
        key, _, value = line.partition(":")
        try:
            if key.strip() == "SliderMultiplier":
                beatmap.slider_multiplier = float(value)
            elif key.strip() == "SliderTickRate":
                beatmap.slider_tick_rate = float(value)
        except ValueError as e:
            raise BeatmapDecodeError(f"Invalid difficulty value: {line!r}") from e

    beatmap.timing = _parse_timing_points(sections.get("TimingPoints", []))

    for line in sections.get("HitObjects", []):
        parts = line.split(",")
        if len(parts) < 4:
            raise BeatmapDecodeError(f"Invalid hit object: {line!r}")
        try:
            time = float(parts[2])
            object_type = int(parts[3])
            if object_type & OBJECT_CIRCLE:
                beatmap.circles += 1
            elif object_type & OBJECT_SLIDER:
                spans = max(int(parts[6]), 1)
                length = float(parts[7]) if len(parts) > 7 else 0.0
                beatmap.slider_combo += _slider_combo(beatmap, time, spans, length)
            elif object_type & OBJECT_SPINNER:
                beatmap.spinners += 1
        except (ValueError, IndexError) as e:
            raise BeatmapDecodeError(f"Invalid hit object: {line!r}") from e

    return beatmap


def compute_max_combo(content: bytes) -> int:
    """Return the maximum combo achievable on a .osu file."""
    return decode(content).max_combo
