"""Typed errors raised at the package boundaries."""

from __future__ import annotations


class MACrossError(Exception):
    """Base class for errors raised by ma_cross."""


class ConfigError(MACrossError, ValueError):
    """Malformed configuration (unknown MA type, bad window, negative cost)."""


class MetricsError(MACrossError, ValueError):
    """A performance statistic is undefined for the given equity curve."""


class DataError(MACrossError, ValueError):
    """Price data cannot be used for the requested operation."""
