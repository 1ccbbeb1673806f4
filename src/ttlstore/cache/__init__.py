from .ttl_store import Entry, SweepState, TTLStore

__all__ = ["Entry", "SweepState", "TTLStore"]
