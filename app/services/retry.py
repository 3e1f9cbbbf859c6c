import random

def compute_backoff_seconds(attempt: int, base: int = 10, cap: int = 900, max_jitter: int = 30) -> int:
    """Exponential backoff for worker retries; attempt is 1-based."""
    exp = min(cap, base * (2 ** max(0, attempt - 1)))
    return exp + random.randint(0, min(max_jitter, exp // 3))
