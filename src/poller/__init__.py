"""Polling scheduler — drives the alert pipeline on a fixed cadence."""

from src.poller.scheduler import AlertPoller, SnapshotCallback

__all__ = ["AlertPoller", "SnapshotCallback"]
