"""
Target distance extraction from free-text workout descriptions.

Coaching shorthand such as "13 Ez", "3 x 2k", "6 x (1k @ Thr)" or
"400m + 3k" is reduced to a total in kilometers by a fixed sequence of
string rewrites followed by a per-segment sum. Anything the patterns do
not recognise contributes nothing.
"""

import math
import re

# "400m" -> "0.4k"
METER_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*m\b', re.IGNORECASE)

# "13 Ez" -> "13k"; a trailing ' marks minutes, not kilometers
RUN_TYPE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:Ez|Mp|Thr|I|R)\b(?!['’′])", re.IGNORECASE)

# "3 x 2k", "5 × (1k", "4*1.5k"
REPEAT_PATTERN = re.compile(r'(\d+)\s*[x×*]\s*\(?(\d+(?:\.\d+)?)\s*k', re.IGNORECASE)

SIMPLE_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*k', re.IGNORECASE)

SEGMENT_SEPARATOR = '+'


def _format_km(value: float) -> str:
    return ('%f' % value).rstrip('0').rstrip('.')


def normalize_meters(text: str) -> str:
    """Rewrite meter literals as kilometer literals."""
    return METER_PATTERN.sub(lambda m: _format_km(float(m.group(1)) / 1000) + 'k', text)


def normalize_run_types(text: str) -> str:
    """Rewrite run-type shorthand (Ez, Mp, Thr, I, R) as kilometer literals."""
    return RUN_TYPE_PATTERN.sub(lambda m: m.group(1) + 'k', text)


def segment_distance(segment: str) -> float:
    """
    Sum the distance described by one '+'-separated segment.

    Repeat blocks ("reps x dist") take precedence; plain distances are only
    counted when the segment has no repeat block.
    """
    repeats = [int(reps) * float(dist) for reps, dist in REPEAT_PATTERN.findall(segment)]
    if repeats:
        return sum(repeats)
    return sum(float(dist) for dist in SIMPLE_PATTERN.findall(segment))


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to the given number of decimals, halves rounded up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def extract_distance(description: str) -> float:
    """
    Extract the target distance of a workout description.

    Args:
        description: Free-text workout description from the plan

    Returns:
        Distance in km rounded to 1 decimal, 0.0 when nothing matches
    """
    if not description:
        return 0.0

    normalized = normalize_run_types(normalize_meters(description))
    total = sum(segment_distance(segment) for segment in normalized.split(SEGMENT_SEPARATOR))
    return round_half_up(total)
