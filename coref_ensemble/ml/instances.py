"""
Fixed-schema encoding of coreference pairs into classifier instances
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from ..errors import ConfigurationError, EncodingError, OutputWriteError
from ..features.base import FeatureExtractor
from ..models import CoreferencePair

logger = logging.getLogger(__name__)

POSITIVE = "+"
NEGATIVE = "-"
UNKNOWN = "?"
LABELS = (POSITIVE, NEGATIVE, UNKNOWN)

PREDICTOR_COLUMN = "predictor"
LABEL_COLUMN = "label"


@dataclass(frozen=True)
class Column:
    """One attribute of the instance table: numeric, or nominal over a fixed domain."""

    name: str
    numeric: bool
    domain: tuple[str, ...] = ()

    def encode(self, value: str) -> float:
        if self.numeric:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise EncodingError(f"Column '{self.name}' expects a number, got '{value}'") from None
        try:
            return float(self.domain.index(value))
        except ValueError:
            raise EncodingError(
                f"Value '{value}' not in domain of column '{self.name}': {list(self.domain)}"
            ) from None

    def decode(self, cell: float) -> Any:
        if self.numeric:
            return float(cell)
        index = int(cell)
        if not 0 <= index < len(self.domain):
            raise EncodingError(f"Index {index} outside domain of column '{self.name}'")
        return self.domain[index]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "numeric": self.numeric, "domain": list(self.domain)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Column":
        return cls(name=data["name"], numeric=bool(data["numeric"]), domain=tuple(data.get("domain", ())))


@dataclass(frozen=True)
class InstanceSchema:
    """
    Column layout shared by every row of a run.

    Feature columns come first in extractor order, followed by the
    predictor column and the label column.
    """

    columns: tuple[Column, ...]

    @classmethod
    def build(cls, extractors: Sequence[FeatureExtractor], predictors: Sequence[str]) -> "InstanceSchema":
        if not predictors:
            raise ConfigurationError("Instance schema needs at least one predictor")
        columns = [
            Column(extractor.name, extractor.is_numeric, tuple(extractor.domain()))
            for extractor in extractors
        ]
        columns.append(Column(PREDICTOR_COLUMN, False, tuple(predictors)))
        columns.append(Column(LABEL_COLUMN, False, LABELS))
        return cls(tuple(columns))

    @property
    def names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def feature_columns(self) -> tuple[Column, ...]:
        return self.columns[:-2]

    @property
    def feature_names(self) -> list[str]:
        return [column.name for column in self.feature_columns]

    @property
    def predictor_column(self) -> Column:
        return self.columns[-2]

    @property
    def label_column(self) -> Column:
        return self.columns[-1]

    def encode(self, pair: CoreferencePair, predictor: str, label: str) -> tuple[float, ...]:
        cells = []
        for column in self.feature_columns:
            feature = pair.feature(column.name)
            if feature is None:
                raise EncodingError(f"Pair {pair.describe()} has no value for feature '{column.name}'")
            if column.numeric and isinstance(feature.value, bool):
                raise EncodingError(f"Column '{column.name}' expects a number, got a boolean")
            cells.append(column.encode(feature.string_value))
        cells.append(self.predictor_column.encode(predictor))
        cells.append(self.label_column.encode(label))
        return tuple(cells)

    def encode_scoring(self, pair: CoreferencePair, predictor: str) -> tuple[float, ...]:
        return self.encode(pair, predictor, UNKNOWN)

    def encode_cells(self, values: Sequence[Any]) -> tuple[float, ...]:
        """Encode one row of rendered values, e.g. read back from a table file."""
        if len(values) != len(self.columns):
            raise EncodingError(f"Row has {len(values)} cells, schema has {len(self.columns)} columns")
        return tuple(column.encode(str(value)) for column, value in zip(self.columns, values))

    def decode(self, row: Sequence[float]) -> dict[str, Any]:
        if len(row) != len(self.columns):
            raise EncodingError(f"Row has {len(row)} cells, schema has {len(self.columns)} columns")
        return {column.name: column.decode(cell) for column, cell in zip(self.columns, row)}

    def project(self, names: Sequence[str]) -> "InstanceSchema":
        """Schema over the named feature columns plus predictor and label."""
        by_name = {column.name: column for column in self.feature_columns}
        missing = [name for name in names if name not in by_name]
        if missing:
            raise ConfigurationError(f"Unknown feature columns: {', '.join(missing)}")
        return InstanceSchema(
            tuple(by_name[name] for name in names) + (self.predictor_column, self.label_column)
        )

    def validate(self, header: Sequence[str]) -> None:
        if list(header) != self.names:
            raise EncodingError(f"Table header {list(header)} does not match schema {self.names}")

    def to_dict(self) -> dict[str, Any]:
        return {"columns": [column.to_dict() for column in self.columns]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstanceSchema":
        try:
            columns = tuple(Column.from_dict(column) for column in data["columns"])
        except (KeyError, TypeError) as e:
            raise EncodingError(f"Malformed instance schema: {e}") from e
        if len(columns) < 2 or columns[-1].name != LABEL_COLUMN or columns[-2].name != PREDICTOR_COLUMN:
            raise EncodingError("Instance schema must end with the predictor and label columns")
        return cls(columns)


def schema_path(path: Path) -> Path:
    """Sidecar file holding the schema of the table stored at ``path``."""
    return path.with_suffix(".schema.json")


class InstanceTable:
    """Encoded rows over one schema; persisted as CSV plus a schema sidecar."""

    def __init__(self, schema: InstanceSchema, rows: Optional[Iterable[Sequence[float]]] = None):
        self.schema = schema
        self.rows: list[tuple[float, ...]] = [tuple(row) for row in rows or []]

    def __len__(self) -> int:
        return len(self.rows)

    def add_row(self, row: Sequence[float]) -> None:
        if len(row) != len(self.schema.columns):
            raise EncodingError(f"Row has {len(row)} cells, schema has {len(self.schema.columns)} columns")
        self.rows.append(tuple(row))

    def add_training(self, pair: CoreferencePair, predictor: str, label: str) -> tuple[float, ...]:
        row = self.schema.encode(pair, predictor, label)
        self.rows.append(row)
        return row

    def add_pairs(self, pairs: Iterable[CoreferencePair], predictor: str, label: str) -> int:
        """Encode pairs with a shared label; unencodable pairs are logged and skipped."""
        added = 0
        for pair in pairs:
            try:
                self.add_training(pair, predictor, label)
                added += 1
            except EncodingError as e:
                logger.warning(f"Skipping pair for '{predictor}': {e}")
        return added

    def feature_matrix(self) -> np.ndarray:
        """All columns but the label, including the predictor column."""
        width = len(self.schema.columns) - 1
        if not self.rows:
            return np.empty((0, width))
        return np.asarray(self.rows, dtype=float)[:, :width]

    def labels(self) -> list[str]:
        label_column = self.schema.label_column
        return [label_column.decode(row[-1]) for row in self.rows]

    def project(self, names: Sequence[str]) -> "InstanceTable":
        schema = self.schema.project(names)
        positions = [self.schema.names.index(column.name) for column in schema.columns]
        return InstanceTable(schema, [tuple(row[i] for i in positions) for row in self.rows])

    def to_frame(self) -> pd.DataFrame:
        records = [self.schema.decode(row) for row in self.rows]
        return pd.DataFrame.from_records(records, columns=self.schema.names)

    def save(self, path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.to_frame().to_csv(path, index=False)
            with open(schema_path(path), "w", encoding="utf-8") as f:
                json.dump(self.schema.to_dict(), f, indent=2)
        except OSError as e:
            raise OutputWriteError(f"Couldn't write instance table to {path}: {e}") from e
        logger.info(f"Wrote {len(self.rows)} instances to {path}")

    @classmethod
    def load(cls, path: Path) -> "InstanceTable":
        sidecar = schema_path(path)
        if not path.exists() or not sidecar.exists():
            raise ConfigurationError(f"Instance table not found: {path} (with {sidecar.name})")

        try:
            with open(sidecar, "r", encoding="utf-8") as f:
                schema = InstanceSchema.from_dict(json.load(f))
            frame = pd.read_csv(path, dtype=str, keep_default_na=False)
        except (OSError, json.JSONDecodeError, pd.errors.ParserError) as e:
            raise EncodingError(f"Couldn't read instance table {path}: {e}") from e
        except pd.errors.EmptyDataError:
            raise EncodingError(f"Instance table {path} is empty") from None

        schema.validate(frame.columns)
        rows = [schema.encode_cells(record) for record in frame.itertuples(index=False, name=None)]
        logger.info(f"Loaded {len(rows)} instances from {path}")
        return cls(schema, rows)
