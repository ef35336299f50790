"""Live collection subscription package."""

from src.streams.subscriber import Snapshot, StreamSubscriber, Subscription

__all__ = ["Snapshot", "StreamSubscriber", "Subscription"]
