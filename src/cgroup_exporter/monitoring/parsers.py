"""Parsers for kernel accounting files.

Three textual formats are supported:

- Key/value tables (cgroup v1 memory.stat):
    cache 3293184
    rss 487424

- Scalar nanosecond counters (cgroup v1 cpuacct.usage):
    61239221

- Device tables with a two-line header (/proc/<pid>/net/dev):
    Inter-|   Receive                            |  Transmit
     face |bytes    packets errs drop fifo ...   |bytes    packets errs ...
      eth0: 29473964  297207    0    0    0 ...   977390200  289365    0 ...

Parsers take any iterable of lines (an open file, io.StringIO, a list) so they
can be exercised without touching the filesystem.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import TypeVar

from cgroup_exporter.core.exceptions import StatParseError
from cgroup_exporter.monitoring.aggregation import nanoseconds_to_seconds
from cgroup_exporter.monitoring.base import DeviceTable, Direction

T = TypeVar("T")

# The interface name ends with ':' while data columns are padded with runs of
# spaces; both are field boundaries.
FIELD_SEPARATOR = re.compile(r"[ :] *")


def parse_key_value_stats(lines: Iterable[str], source: str = "<stream>") -> dict[str, float]:
    """Parse 'name value' lines into a mapping.

    Blank lines are skipped and later duplicates overwrite earlier ones. Any
    malformed line rejects the whole file.

    Args:
        lines: Input lines
        source: Label used in error messages (usually the file path)

    Returns:
        Mapping of field name to value

    Raises:
        StatParseError: If a line is not exactly two fields or the value is not numeric
    """
    stats: dict[str, float] = {}

    for lineno, line in enumerate(lines, start=1):
        parts = line.split()
        if not parts:
            continue
        if len(parts) != 2:
            raise StatParseError(f"line {lineno}: expected 'name value', got {line.strip()!r}", source)

        key, raw = parts
        try:
            stats[key] = float(raw)
        except ValueError as e:
            raise StatParseError(f"invalid value {raw!r} for field {key!r}", source) from e

    return stats


def parse_scalar_counter(lines: Iterable[str], source: str = "<stream>") -> float:
    """Parse a nanosecond counter file into seconds.

    The whole stream is scanned and the last numeric line wins.

    Args:
        lines: Input lines, one counter per non-blank line
        source: Label used in error messages

    Returns:
        Counter value in seconds

    Raises:
        StatParseError: On a non-numeric line. ``partial_value`` holds the
            seconds parsed so far; it must not be published.
    """
    usage = 0.0

    for line in lines:
        token = line.strip()
        if not token:
            continue
        try:
            usage = nanoseconds_to_seconds(float(token))
        except (ValueError, OverflowError) as e:
            raise StatParseError(f"invalid counter value {token!r}", source, partial_value=usage) from e

    return usage


def parse_device_table(lines: Iterable[str], source: str = "<stream>") -> DeviceTable:
    """Parse a /proc/<pid>/net/dev style device table.

    The receive half of the header defines the topic order; the transmit half
    is assumed to repeat it. Data column ``i`` belongs to ``topics[i % n]`` and
    is a receive value for ``i < n``, a transmit value otherwise. Rows with
    fewer columns simply leave their trailing topics unset.

    Args:
        lines: Input lines including both header lines
        source: Label used in error messages

    Returns:
        interface -> topic -> Direction of raw value strings

    Raises:
        StatParseError: If the header is missing or not three '|' segments
    """
    it = iter(lines)
    next(it, None)  # title line
    header = next(it, None)
    if header is None:
        raise StatParseError("missing header line", source)

    header = header.rstrip("\r\n")
    segments = header.split("|")
    if len(segments) != 3:
        raise StatParseError(f"invalid header line: {header!r}", source)

    topics = segments[1].split()
    if not topics:
        raise StatParseError(f"no receive topics in header: {header!r}", source)

    table: DeviceTable = {}
    for line in it:
        line = line.strip()
        if not line:
            continue

        interface, *values = FIELD_SEPARATOR.split(line)
        row: dict[str, Direction] = {}
        for index, value in enumerate(values):
            direction = row.setdefault(topics[index % len(topics)], Direction())
            if index < len(topics):
                direction.receive = value
            else:
                direction.transmit = value
        table[interface] = row

    return table


def read_stat_file(path: Path | str, parser: Callable[[Iterable[str], str], T]) -> T:
    """Open an accounting file and run a parser over it.

    Raises:
        StatParseError: If the parser rejects the file or it is not valid UTF-8
        OSError: If the file cannot be opened or read
    """
    with open(path, encoding="utf-8") as f:
        try:
            return parser(f, str(path))
        except UnicodeDecodeError as e:
            raise StatParseError(f"not valid UTF-8: {e}", str(path)) from e


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_key_value_stats(stats: dict[str, float]) -> str:
    """Render a key/value mapping in memory.stat format."""
    return "".join(f"{key} {_format_number(value)}\n" for key, value in stats.items())


def format_device_table(table: DeviceTable, topics: Sequence[str] | None = None) -> str:
    """Render a device table in /proc/<pid>/net/dev format.

    Args:
        table: Parsed device table
        topics: Topic order for the header. Defaults to the first row's order

    Raises:
        ValueError: If a row is missing a topic or a value (short rows cannot be rendered)
    """
    if topics is None:
        topics = list(next(iter(table.values()), {}))
    topic_header = " ".join(topics)

    lines = [
        "Inter-|   Receive|  Transmit",
        f" face |{topic_header}|{topic_header}",
    ]
    for interface, row in table.items():
        missing = [t for t in topics if t not in row or not row[t].receive or not row[t].transmit]
        if missing:
            raise ValueError(f"interface {interface!r} has no values for {', '.join(missing)}")
        receive = " ".join(row[t].receive for t in topics)
        transmit = " ".join(row[t].transmit for t in topics)
        lines.append(f"{interface}: {receive} {transmit}")

    return "\n".join(lines) + "\n"
