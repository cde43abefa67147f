from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Protocol, Sequence

import numpy as np


class ValueKind(enum.Enum):
    """Closed set of channel value types; every kind but STRING widens to float64 for drawing."""

    FLOAT = "float"
    DOUBLE = "double"
    SHORT = "short"
    LONG = "long"
    CHAR = "char"
    ENUM = "enum"
    STRING = "string"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_DTYPES[self])

    @property
    def is_numeric(self) -> bool:
        return self is not ValueKind.STRING

    @property
    def is_enum(self) -> bool:
        return self is ValueKind.ENUM

    @classmethod
    def parse(cls, raw: str) -> ValueKind:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown channel value kind: {raw!r}") from None


_DTYPES = {
    ValueKind.FLOAT: np.float32,
    ValueKind.DOUBLE: np.float64,
    ValueKind.SHORT: np.int16,
    ValueKind.LONG: np.int32,
    ValueKind.CHAR: np.uint8,
    ValueKind.ENUM: np.int16,
    ValueKind.STRING: np.object_,
}


class ChannelSource(Protocol):
    """What the plotting engine reads from one acquired channel."""

    name: str
    label: str
    kind: ValueKind
    capacity: int
    el_count: int
    connected: bool
    is_data: bool
    display_low: float
    display_high: float
    observed_min: float
    observed_max: float
    states: Sequence[str]

    def is_missing(self, index: int) -> bool:
        ...

    def is_restart(self, index: int) -> bool:
        ...

    def is_filled(self, index: int) -> bool:
        ...

    def status_code(self, index: int) -> str:
        ...

    def value_at(self, index: int) -> float:
        ...

    def elements_at(self, index: int) -> np.ndarray:
        ...


@dataclass
class Channel:
    """Circular sample buffer for one channel with parallel per-sample flags."""

    name: str
    kind: ValueKind = ValueKind.DOUBLE
    capacity: int = 1024
    el_count: int = 1
    label: str = ""
    display_low: float = 0.0
    display_high: float = 0.0
    states: list[str] = field(default_factory=list)
    connected: bool = True
    is_data: bool = True
    observed_min: float = 0.0
    observed_max: float = 0.0
    values: np.ndarray = field(init=False, repr=False)
    missing: np.ndarray = field(init=False, repr=False)
    restart: np.ndarray = field(init=False, repr=False)
    filled: np.ndarray = field(init=False, repr=False)
    status_codes: np.ndarray = field(init=False, repr=False)
    _has_observed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("channel capacity must be > 0")
        if self.el_count <= 0:
            raise ValueError("channel el_count must be > 0")
        if not self.label:
            self.label = self.name
        self.values = np.zeros((self.capacity, self.el_count), dtype=self.kind.dtype)
        if self.kind is ValueKind.STRING:
            self.values[:] = ""
        self.missing = np.ones(self.capacity, dtype=bool)
        self.restart = np.zeros(self.capacity, dtype=bool)
        self.filled = np.zeros(self.capacity, dtype=bool)
        self.status_codes = np.full(self.capacity, " ", dtype="<U1")

    def store(
        self,
        index: int,
        value: float | str | Sequence[float],
        *,
        restart: bool = False,
        status: str = " ",
    ) -> None:
        """Write one sample; overwriting an index clears its missing and filled flags."""
        self._check_index(index)
        if self.kind is ValueKind.ENUM and isinstance(value, str):
            value = self.states.index(value)
        row = np.broadcast_to(np.asarray(value, dtype=self.kind.dtype), (self.el_count,))
        self.values[index] = row
        self.missing[index] = False
        self.restart[index] = restart
        self.filled[index] = False
        self.status_codes[index] = (status or " ")[0]
        if self.kind.is_numeric:
            self._observe(row.astype(np.float64))

    def mark_missing(self, index: int) -> None:
        self._check_index(index)
        self.missing[index] = True
        self.filled[index] = False

    def mark_filled(self, begin: int, end: int) -> None:
        """Flag the inclusive, possibly wrapping range [begin, end] as already rendered."""
        self._check_index(begin)
        self._check_index(end)
        i = begin
        while True:
            self.filled[i] = True
            if i == end:
                break
            i = (i + 1) % self.capacity

    def is_missing(self, index: int) -> bool:
        return bool(self.missing[index])

    def is_restart(self, index: int) -> bool:
        return bool(self.restart[index])

    def is_filled(self, index: int) -> bool:
        return bool(self.filled[index])

    def status_code(self, index: int) -> str:
        return str(self.status_codes[index])

    def value_at(self, index: int) -> float:
        return float(self.values[index, 0])

    def elements_at(self, index: int) -> np.ndarray:
        return self.values[index].astype(np.float64)

    def _observe(self, row: np.ndarray) -> None:
        finite = row[np.isfinite(row)]
        if finite.size == 0:
            return
        lo = float(finite.min())
        hi = float(finite.max())
        if not self._has_observed:
            self.observed_min, self.observed_max = lo, hi
            self._has_observed = True
            return
        self.observed_min = min(self.observed_min, lo)
        self.observed_max = max(self.observed_max, hi)

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.capacity:
            raise ValueError(f"sample index {index} outside buffer of capacity {self.capacity}")


REFERENCE_TIME_FORMAT = "%m/%d/%y %H:%M:%S"


@dataclass
class SampleSet:
    """Synchronous set of channels sharing one circular time-offset buffer.

    ``delta_sec[i]`` is the offset in seconds of sample ``i`` from ``ref_time``.
    ``first_data`` and ``last_data`` bound the valid, possibly wrapping, range.
    """

    capacity: int = 1024
    ref_time: datetime = field(default_factory=datetime.now)
    requested_count: int = 0
    delta_sec: np.ndarray = field(init=False, repr=False)
    first_data: int = field(default=0, init=False)
    last_data: int = field(default=0, init=False)
    sample_count: int = field(default=0, init=False)
    channels: dict[str, Channel] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("sample set capacity must be > 0")
        if self.requested_count <= 0:
            self.requested_count = self.capacity
        self.delta_sec = np.zeros(self.capacity, dtype=np.float64)

    @property
    def ref_label(self) -> str:
        return self.ref_time.strftime(REFERENCE_TIME_FORMAT)

    def add_channel(
        self,
        name: str,
        kind: ValueKind = ValueKind.DOUBLE,
        *,
        el_count: int = 1,
        display_low: float = 0.0,
        display_high: float = 0.0,
        states: Sequence[str] = (),
        label: str = "",
    ) -> Channel:
        if name in self.channels:
            raise ValueError(f"duplicate channel name: {name}")
        channel = Channel(
            name=name,
            kind=kind,
            capacity=self.capacity,
            el_count=el_count,
            label=label,
            display_low=display_low,
            display_high=display_high,
            states=list(states),
        )
        self.channels[name] = channel
        return channel

    def push(
        self,
        t: float,
        values: Mapping[str, float | str | Sequence[float] | None],
        *,
        restart: Sequence[str] = (),
        status: Mapping[str, str] | None = None,
    ) -> int:
        """Append one sample time; channels absent from ``values`` (or None) are marked missing."""
        if self.sample_count == 0:
            index = 0
            self.first_data = 0
        else:
            index = (self.last_data + 1) % self.capacity
            if self.sample_count >= self.capacity:
                self.first_data = (self.first_data + 1) % self.capacity
        self.last_data = index
        self.sample_count = min(self.sample_count + 1, self.capacity)
        self.delta_sec[index] = float(t)

        unknown = set(values) - set(self.channels)
        if unknown:
            raise ValueError(f"unknown channel(s): {', '.join(sorted(unknown))}")
        codes = status or {}
        for name, channel in self.channels.items():
            value = values.get(name)
            if value is None:
                channel.mark_missing(index)
                continue
            channel.store(index, value, restart=name in restart, status=codes.get(name, " "))
        return index

    def ordinal(self, index: int) -> int:
        """Position of ``index`` counted from ``first_data``."""
        return (index - self.first_data) % self.capacity
