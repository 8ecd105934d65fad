from .store import get_local_tz, lookup_offset, reset_local_tz

__all__ = ["get_local_tz", "lookup_offset", "reset_local_tz"]
