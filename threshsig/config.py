"""
Per session inputs and the worker pool used for per party computations.
"""

import os
from concurrent.futures import ThreadPoolExecutor

DEFAULT_MAX_WORKERS = 10
MAX_WORKERS_ENV = "THRESHSIG_MAX_WORKERS"


class SessionConfig:
    """
    Threshold pair, message and randomness source of one signing session.

    t: minimum number of parties needed to sign, 1 <= t <= n.
    n: total number of parties.
    rng: randrange capable source, None means the OS CSPRNG.
    max_workers: threads used for per party work. Falls back to the
        THRESHSIG_MAX_WORKERS environment variable, then min(n, 10).
    """

    def __init__(self, t: int, n: int, message: bytes, rng=None, max_workers=None):
        if not all(isinstance(arg, int) for arg in (t, n)):
            raise ValueError("t and n must be integers")
        if t < 1:
            raise ValueError(f"Threshold {t} must be at least 1")
        if t > n:
            raise ValueError(f"Threshold {t} cannot be greater than total parties {n}")
        if not isinstance(message, (bytes, bytearray)):
            raise ValueError("message must be bytes")

        self.t = t
        self.n = n
        self.message = bytes(message)
        self.rng = rng
        if max_workers is None:
            max_workers = int(os.environ.get(MAX_WORKERS_ENV, min(n, DEFAULT_MAX_WORKERS)))
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers

    def __repr__(self):
        return f"SessionConfig(t={self.t}, n={self.n}, message={self.message!r})"


def run_parallel(fn, items, max_workers=None):
    """
    [fn(item) for item in items] computed on a thread pool. Results keep the
    order of items; the first exception raised by fn propagates.
    """
    items = list(items)
    if not items:
        return []
    if max_workers is None:
        max_workers = min(len(items), DEFAULT_MAX_WORKERS)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fn, items))
