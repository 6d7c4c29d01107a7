"""
Sparse matrix formats used by the associative-memory engine.

Two representations are provided. ``TripletMatrix`` is an unordered list of
(row, column, value) entries, convenient for incremental construction and for
merging. ``CompressedMatrix`` is a row-major compressed format (values,
column indices and row offsets) optimised for repeated matrix-vector
products. A compressed matrix is always derived from a sorted and combined
triplet matrix.

Both formats are generic over the numeric value type through a numpy
``dtype``.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Union

import numpy as np

__all__ = [
    "DTYPE",
    "MAX_PRINT",
    "DimensionMismatchError",
    "Triplet",
    "TripletMatrix",
    "CompressedMatrix",
]

DTYPE = np.float64
MAX_PRINT = 10

Number = Union[int, float, np.number]


class DimensionMismatchError(ValueError):
    """Raised when matrix or vector sizes disagree."""


def _index(value: Number, kind: str) -> int:
    index = int(value)
    if index != value:
        raise IndexError(f"{kind} index {value!r} is not an integer")
    return index


def _index_array(values: Sequence[Number], kind: str) -> np.ndarray:
    raw = np.asarray(values)
    indices = raw.astype(np.int64)
    if np.any(indices != raw):
        raise IndexError(f"{kind} indices must be integers")
    return indices


class Triplet(NamedTuple):
    row: int
    col: int
    value: Number


class TripletMatrix:
    """Unordered (row, col, value) sparse matrix with fixed dimensions.

    Entries outside the declared ``(n, m)`` shape are rejected with
    ``IndexError``; the dimensions never grow. Duplicate coordinates are
    allowed and are summed by :meth:`sort_and_combine`.
    """

    def __init__(
        self,
        rows: int,
        cols: int,
        name: str = "",
        *,
        dtype: np.dtype = DTYPE,
        entries: Optional[Iterable[Sequence[Number]]] = None,
    ) -> None:
        if rows < 0 or cols < 0:
            raise ValueError("matrix dimensions must be non-negative")

        self.n = int(rows)
        self.m = int(cols)
        self.name = name
        self.dtype = np.dtype(dtype)

        self._rows: List[int] = []
        self._cols: List[int] = []
        self._vals: List[Number] = []

        if entries is not None:
            self.extend(entries)

    @classmethod
    def from_arrays(
        cls,
        rows: int,
        cols: int,
        row_indices: Sequence[int],
        column_indices: Sequence[int],
        values: Sequence[Number],
        name: str = "",
        *,
        dtype: np.dtype = DTYPE,
    ) -> "TripletMatrix":
        """Bulk construction from parallel index/value arrays."""
        r = _index_array(row_indices, "row")
        c = _index_array(column_indices, "column")
        v = np.asarray(values, dtype=dtype)
        if not r.shape == c.shape == v.shape or r.ndim != 1:
            raise DimensionMismatchError("row, column and value arrays must be 1-d and of equal length")
        if r.size and (r.min() < 0 or r.max() >= rows):
            raise IndexError(f"row index out of range for {rows} rows")
        if c.size and (c.min() < 0 or c.max() >= cols):
            raise IndexError(f"column index out of range for {cols} columns")

        matrix = cls(rows, cols, name, dtype=dtype)
        matrix._rows = r.tolist()
        matrix._cols = c.tolist()
        matrix._vals = v.tolist()
        return matrix

    def __len__(self) -> int:
        return len(self._vals)

    def __iter__(self) -> Iterator[Triplet]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"TripletMatrix(name={self.name!r}, shape={self.shape}, entries={len(self)})"

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n, self.m)

    @property
    def entries(self) -> List[Triplet]:
        return [Triplet(r, c, v) for r, c, v in zip(self._rows, self._cols, self._vals)]

    def insert(self, entry: Sequence[Number]) -> None:
        """Append a single ``(row, col, value)`` entry."""
        row, col, value = entry
        row = _index(row, "row")
        col = _index(col, "column")
        if not 0 <= row < self.n:
            raise IndexError(f"row {row} out of range for {self.n} rows in {self.name or 'matrix'}")
        if not 0 <= col < self.m:
            raise IndexError(f"column {col} out of range for {self.m} columns in {self.name or 'matrix'}")
        self._rows.append(row)
        self._cols.append(col)
        self._vals.append(value)

    def extend(self, entries: Iterable[Sequence[Number]]) -> None:
        for entry in entries:
            self.insert(entry)

    def _arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        rows = np.asarray(self._rows, dtype=np.int64)
        cols = np.asarray(self._cols, dtype=np.int64)
        vals = np.asarray(self._vals, dtype=self.dtype)
        return rows, cols, vals

    def sort_and_combine(self) -> None:
        """Sort entries row-major and sum entries sharing (row, col)."""
        if not self._vals:
            return

        rows, cols, vals = self._arrays()

        # lexsort uses the last key as the primary one
        order = np.lexsort((cols, rows))
        rows = rows[order]
        cols = cols[order]
        vals = vals[order]

        new_run = np.ones(rows.shape[0], dtype=bool)
        new_run[1:] = (rows[1:] != rows[:-1]) | (cols[1:] != cols[:-1])
        starts = np.flatnonzero(new_run)

        self._rows = rows[starts].tolist()
        self._cols = cols[starts].tolist()
        self._vals = np.add.reduceat(vals, starts).tolist()

    def to_compressed(self) -> "CompressedMatrix":
        """Derive the compressed row form. Sorts and combines in place first."""
        self.sort_and_combine()
        rows, cols, vals = self._arrays()

        # searchsorted records the running nonzero count at every row boundary,
        # trailing empty rows included
        offsets = np.searchsorted(rows, np.arange(self.n + 1), side="left")

        return CompressedMatrix._from_arrays(
            self.n,
            self.m,
            values=vals,
            column_indices=cols,
            row_offsets=offsets,
            name=self.name,
        )

    def format(self, max_entries: Optional[int] = MAX_PRINT) -> str:
        lines = [f"Triplet Matrix - {self.name}:"]
        for i, (r, c, v) in enumerate(zip(self._rows, self._cols, self._vals)):
            if max_entries is not None and i >= max_entries:
                break
            lines.append(f"({r}, {c}): {v:g}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class CompressedMatrix:
    """Row-major compressed sparse matrix.

    ``row_offsets[r]:row_offsets[r + 1]`` delimits the nonzero run of row
    ``r`` inside ``values`` and ``column_indices``; columns are ascending
    within a row. Instances are produced by :meth:`TripletMatrix.to_compressed`.
    A freshly constructed matrix is empty (no stored entries).
    """

    def __init__(self, rows: int = 0, cols: int = 0, name: str = "", *, dtype: np.dtype = DTYPE) -> None:
        if rows < 0 or cols < 0:
            raise ValueError("matrix dimensions must be non-negative")
        self.n = int(rows)
        self.m = int(cols)
        self.name = name
        self.values = np.zeros(0, dtype=dtype)
        self.column_indices = np.zeros(0, dtype=np.int64)
        self.row_offsets = np.zeros(self.n + 1, dtype=np.int64)

    @classmethod
    def _from_arrays(
        cls,
        rows: int,
        cols: int,
        *,
        values: np.ndarray,
        column_indices: np.ndarray,
        row_offsets: np.ndarray,
        name: str = "",
    ) -> "CompressedMatrix":
        matrix = cls(rows, cols, name, dtype=values.dtype)
        matrix.values = values
        matrix.column_indices = np.asarray(column_indices, dtype=np.int64)
        matrix.row_offsets = np.asarray(row_offsets, dtype=np.int64)
        return matrix

    def __repr__(self) -> str:
        return f"CompressedMatrix(name={self.name!r}, shape={self.shape}, nnz={self.nnz})"

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n, self.m)

    @property
    def nnz(self) -> int:
        return int(self.values.shape[0])

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    def row_indices(self) -> np.ndarray:
        """Row index of every stored entry, aligned with ``values``."""
        return np.repeat(np.arange(self.n, dtype=np.int64), np.diff(self.row_offsets))

    def iter_entries(self) -> Iterator[Triplet]:
        for r in range(self.n):
            for i in range(self.row_offsets[r], self.row_offsets[r + 1]):
                yield Triplet(r, int(self.column_indices[i]), self.values[i].item())

    def to_triplet(self) -> TripletMatrix:
        return TripletMatrix.from_arrays(
            self.n,
            self.m,
            self.row_indices(),
            self.column_indices,
            self.values,
            self.name,
            dtype=self.dtype,
        )

    def multiply(self, vector: Sequence[Number]) -> np.ndarray:
        """Return ``self * vector`` as a dense array of length ``n``."""
        vec = np.asarray(vector)
        if vec.ndim != 1 or vec.shape[0] != self.m:
            raise DimensionMismatchError(
                f"vector of shape {vec.shape} cannot multiply matrix of shape {self.shape}"
            )

        result = np.zeros(self.n, dtype=np.result_type(self.dtype, vec.dtype))
        if self.nnz:
            products = self.values * vec[self.column_indices]
            np.add.at(result, self.row_indices(), products)
        return result

    def __matmul__(self, vector: Sequence[Number]) -> np.ndarray:
        return self.multiply(vector)

    def add_assign(self, other: "CompressedMatrix") -> "CompressedMatrix":
        """Add ``other`` into this matrix through a triplet merge.

        The result takes the promoted value type of both operands, so an
        integer matrix plus a float matrix becomes a float matrix.
        """
        if other.shape != self.shape:
            raise DimensionMismatchError(f"cannot add matrix of shape {other.shape} to {self.shape}")

        triplet = TripletMatrix.from_arrays(
            self.n,
            self.m,
            np.concatenate([self.row_indices(), other.row_indices()]),
            np.concatenate([self.column_indices, other.column_indices]),
            np.concatenate([self.values, other.values]),
            self.name,
            dtype=np.result_type(self.dtype, other.dtype),
        )
        merged = triplet.to_compressed()

        self.values = merged.values
        self.column_indices = merged.column_indices
        self.row_offsets = merged.row_offsets
        return self

    def __iadd__(self, other: "CompressedMatrix") -> "CompressedMatrix":
        return self.add_assign(other)

    def zeros_like(self, name: Optional[str] = None) -> "CompressedMatrix":
        """Matrix with this sparsity pattern and all stored values zero."""
        return CompressedMatrix._from_arrays(
            self.n,
            self.m,
            values=np.zeros_like(self.values),
            column_indices=self.column_indices.copy(),
            row_offsets=self.row_offsets.copy(),
            name=self.name if name is None else name,
        )

    def copy(self) -> "CompressedMatrix":
        return CompressedMatrix._from_arrays(
            self.n,
            self.m,
            values=self.values.copy(),
            column_indices=self.column_indices.copy(),
            row_offsets=self.row_offsets.copy(),
            name=self.name,
        )

    def to_dense(self) -> np.ndarray:
        dense = np.zeros(self.shape, dtype=self.dtype)
        dense[self.row_indices(), self.column_indices] = self.values
        return dense

    def format(self, max_entries: Optional[int] = MAX_PRINT) -> str:
        lines = [f"Compressed Matrix - {self.name}:"]
        for i, (r, c, v) in enumerate(self.iter_entries()):
            if max_entries is not None and i >= max_entries:
                break
            lines.append(f"({r}, {c}): {v:g}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()
