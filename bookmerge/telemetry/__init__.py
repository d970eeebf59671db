"""Run telemetry for the merge pipeline."""

from .logger import RunLogger

__all__ = ["RunLogger"]
