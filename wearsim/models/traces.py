# Copyright (c) 2024 Ian Hill
# SPDX-License-Identifier: Apache-2.0

"""Workload trace data points and the parser for delimited trace files"""

from __future__ import annotations

from types import MappingProxyType
import pandas as pd

from wearsim.exceptions import MissingParamError, UserConfigError

__all__ = ['DataPoint', 'parse_trace']


class DataPoint:
    """
    One sample of a unit's operating conditions, held constant for the sample's duration.

    Attributes
    ----------
    time: float
        Timestamp of the sample within its trace, in seconds
    duration: float
        Length of time the operating conditions apply for, in seconds
    data: Mapping of str to float
        Read-only mapping from quantity names (vdd, temperature, frequency, activity, power, ...) to values
    """
    __slots__ = ['time', 'duration', 'data']

    def __init__(self, time: float, duration: float, data: dict):
        self.time = time
        self.duration = duration
        self.data = MappingProxyType(dict(data))

    def __getitem__(self, quantity: str) -> float:
        try:
            return self.data[quantity]
        except KeyError as e:
            raise MissingParamError(f"Quantity '{quantity}' is not defined by the trace or the unit defaults.") from e

    def __contains__(self, quantity: str) -> bool:
        return quantity in self.data

    def with_values(self, defaults: dict = None, **overrides) -> DataPoint:
        """Return a new data point with missing quantities filled from 'defaults' and the 'overrides' applied."""
        merged = dict(defaults) if defaults else {}
        merged.update(self.data)
        merged.update(overrides)
        return DataPoint(self.time, self.duration, merged)

    def __repr__(self):
        return f"DataPoint(time={self.time}, duration={self.duration}, data={dict(self.data)})"


def parse_trace(file: str, delimiter: str = ',') -> list[DataPoint]:
    """
    Read a workload trace from a delimited text file. The first line holds the column names, the first column is the
    sample time in seconds and every other column is an operating condition quantity.

    Parameters
    ----------
    file: str
        Path to the trace file
    delimiter: str, optional
        Single character separating the values in each row (default ',')

    Returns
    -------
    list of DataPoint
        The trace rows in file order, each lasting from the previous row's timestamp (or 0) to its own
    """
    try:
        frame = pd.read_csv(file, sep=delimiter)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise UserConfigError(f"Unable to read trace file {file}: {e}") from e
    if frame.empty:
        raise UserConfigError(f"Trace file {file} does not contain any samples.")

    frame.columns = [str(col).strip() for col in frame.columns]
    time_col = frame.columns[0]
    quantities = list(frame.columns[1:])
    try:
        times = frame[time_col].astype(float)
        values = frame[quantities].astype(float)
    except ValueError as e:
        raise UserConfigError(f"Trace file {file} contains non-numeric values: {e}") from e

    trace, prev = [], 0.0
    for time, (_, row) in zip(times, values.iterrows()):
        trace.append(DataPoint(time, time - prev, row.to_dict()))
        prev = time
    return trace
