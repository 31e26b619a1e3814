from __future__ import annotations

"""Visitor arrival model.

Walk-in visitors are modelled as a Poisson process with a rate given in
visitors per *minute* (the natural unit at a service counter). Inter-arrival
times of such a process are i.i.d. Exponential(rate), so the generator simply
samples a gap, sleeps, and issues a ticket.
"""

import random


def sample_interarrival_seconds(*, visitors_per_minute: float, rng: random.Random | None = None) -> float:
    """Seconds until the next visitor arrives.

    Args:
        visitors_per_minute: arrival rate, must be > 0.
        rng: optional RNG for reproducible runs.
    """
    if visitors_per_minute <= 0:
        raise ValueError("visitors_per_minute must be > 0")

    r = rng or random
    return float(r.expovariate(visitors_per_minute / 60.0))
