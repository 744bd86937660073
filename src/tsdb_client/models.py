"""
Pydantic data models for the wire format.

A series payload is the unit of the write endpoint's JSON body and of the
query endpoint's JSON response.
"""

from typing import Any, List

from pydantic import BaseModel, model_validator


class SeriesPayload(BaseModel):
    """One named series: a column list and rows aligned positionally to it."""

    name: str
    columns: List[str]
    points: List[List[Any]] = []

    @model_validator(mode="after")
    def _aligned(self):
        width = len(self.columns)
        for i, row in enumerate(self.points):
            if len(row) != width:
                raise ValueError(f"Row {i} has {len(row)} values for {width} columns")
        return self
