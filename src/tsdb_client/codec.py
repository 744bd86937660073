"""
Point encoding and decoding.

Write side: records (dicts) become a SeriesPayload whose columns are the
sorted union of all record keys. Read side: a returned series becomes a list
of dicts; repeated column names are suffixed with their occurrence number.
"""

from __future__ import annotations

import json
from collections import defaultdict
from typing import Any, Mapping, Sequence, Union

from .models import SeriesPayload

Record = Mapping[str, Any]


class PointValue:
    """
    Wire representation of a single field value.

    Dicts and lists travel as compact JSON strings; scalars travel unchanged.
    A str whose text is a JSON object or array cannot be told apart from an
    encoded container, so it loads back as the container. Such strings are
    not supported values.
    """

    def __init__(self, value: Any):
        self.value = value

    def dump(self) -> Any:
        if isinstance(self.value, (dict, list)):
            return json.dumps(self.value, separators=(",", ":"))
        return self.value

    def load(self) -> Any:
        if self._maybe_json():
            try:
                return json.loads(self.value)
            except ValueError:
                return self.value
        return self.value

    def _maybe_json(self) -> bool:
        v = self.value
        if not isinstance(v, str) or len(v) < 2:
            return False
        return (v[0], v[-1]) in (("{", "}"), ("[", "]"))


def build_series(name: str, data: Union[Record, Sequence[Record]]) -> SeriesPayload:
    """Project one or more records onto the sorted union of their keys."""
    records = [data] if isinstance(data, Mapping) else list(data)
    if not records:
        raise ValueError(f"No records given for series {name!r}")

    columns = sorted({k for r in records for k in r})
    points = []
    for i, record in enumerate(records):
        missing = [c for c in columns if c not in record]
        if missing:
            raise ValueError(f"Record {i} of series {name!r} is missing columns {missing}")
        points.append([PointValue(record[c]).dump() for c in columns])

    return SeriesPayload(name=name, columns=columns, points=points)


def dedupe_columns(columns: Sequence[str]) -> list[str]:
    # second "x" becomes "x~1", third "x~2"
    seen: dict[str, int] = defaultdict(lambda: -1)
    out = []
    for c in columns:
        seen[c] += 1
        out.append(f"{c}~{seen[c]}" if seen[c] > 0 else c)
    return out


def denormalize_series(series: Union[SeriesPayload, Mapping[str, Any]]) -> list[dict]:
    """Decode one returned series into a list of records, in row order."""
    if not isinstance(series, SeriesPayload):
        series = SeriesPayload.model_validate(series)
    columns = dedupe_columns(series.columns)
    return [dict(zip(columns, (PointValue(v).load() for v in row))) for row in series.points]
