# impostor/core/clock.py
import time

def now_ms() -> int:
    """Wall-clock time in epoch milliseconds. Every deadline in the game is stored in this unit."""
    return int(time.time() * 1000)
