"""
tspsom - Map Reader

Reads tour instances from plain text files:

    3
    0.0 0.0
    10.0 0.0
    5.0 8.5

The first line holds the number of samples, each following line one
whitespace-separated coordinate pair.  Any malformed line fails the whole
read; nothing is returned partially.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from som_core.samples import SampleMap
from som_core.vector import Vector

logger = logging.getLogger("tspsom.map_reader")


class SampleFormatError(ValueError):
    """The sample file does not follow the count + pairs format.

    Attributes:
        line_number: 1-based line number of the offending line, or None
            if the file ended early.
    """

    def __init__(self, message: str, line_number: Union[int, None] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


def parse_samples(lines: Iterable[str]) -> SampleMap:
    """Parse the count line and coordinate pairs from ``lines``.

    Raises:
        SampleFormatError: On a bad count, a malformed pair, or fewer
            pairs than announced.
    """
    it = iter(lines)

    try:
        header = next(it)
    except StopIteration:
        raise SampleFormatError("missing sample count") from None

    try:
        count = int(header.strip())
    except ValueError:
        raise SampleFormatError(
            f"sample count is not an integer: {header.strip()!r}", 1
        ) from None

    if count < 1:
        raise SampleFormatError(f"sample count must be at least 1, got {count}", 1)

    samples: List[Vector] = []
    for line_number, line in enumerate(it, start=2):
        parts = line.split()
        if len(parts) != 2:
            raise SampleFormatError(
                f"expected 2 coordinates, got {len(parts)}", line_number
            )
        try:
            x, y = float(parts[0]), float(parts[1])
        except ValueError:
            raise SampleFormatError(
                f"coordinates are not numbers: {line.strip()!r}", line_number
            ) from None

        if not (math.isfinite(x) and math.isfinite(y)):
            raise SampleFormatError(
                f"coordinates must be finite: {line.strip()!r}", line_number
            )

        samples.append(Vector(x, y))
        if len(samples) == count:
            break

    if len(samples) < count:
        raise SampleFormatError(
            f"expected {count} samples, file ends after {len(samples)}"
        )

    return SampleMap(samples)


def _decoded_lines(f) -> Iterator[str]:
    for line_number, raw in enumerate(f, 1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SampleFormatError(f"not valid UTF-8 ({e.reason})", line_number) from e


def read_sample_map(path: Union[str, Path]) -> SampleMap:
    """Read the samples (city positions) stored at ``path``.

    Raises:
        FileNotFoundError: If the file does not exist.
        SampleFormatError: If the content is malformed or not UTF-8.
    """
    p = Path(path)
    with open(p, "rb") as f:
        samples = parse_samples(_decoded_lines(f))

    logger.info("Read %d samples from %s", samples.items, p)
    return samples
