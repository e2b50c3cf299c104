"""Kernel time – Clock port + implementations."""
from mp_relay.kernel.time.clock import Clock, FrozenClock, SystemClock, to_naive_utc, utc_now

__all__ = ["Clock", "FrozenClock", "SystemClock", "to_naive_utc", "utc_now"]
