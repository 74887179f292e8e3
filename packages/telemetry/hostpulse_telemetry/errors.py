"""Telemetry failure taxonomy.

Readers raise these internally; the aggregator and strategy chains absorb
them and degrade the affected field to its unavailable value.
"""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for recoverable collection failures."""


class MissingSourceError(TelemetryError):
    """An expected file, counter or command is absent."""


class ParseFailureError(TelemetryError):
    """A source exists but produced malformed or empty output."""
