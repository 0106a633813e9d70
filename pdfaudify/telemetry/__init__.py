"""Telemetry and observability helpers.

This package emits deterministic run events for auditing pipeline activity.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
