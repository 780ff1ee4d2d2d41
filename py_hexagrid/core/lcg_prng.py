"""
Lehmer linear congruential generator used to make grid construction reproducible.

Matches the MINSTD variant (multiplier 48271, modulus 2^31 - 1), so a given
integer seed yields the same sequence as the browser-side generator it
replaces.
"""

from typing import Callable

MULTIPLIER = 48271
MODULUS = 2147483647  # 2^31 - 1

NumberGenerator = Callable[[], float]


class LcgPRNG:
    """
    Seedable generator producing uniform values in [0, 1).

    A seed of 0 (or any multiple of the modulus) locks the state at zero and
    the generator returns 0.0 forever.
    """

    def __init__(self, seed: int):
        """Initialize with an integer seed."""
        self.state = int(seed)
        # Number of values drawn so far
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self.state = (self.state * MULTIPLIER) % MODULUS
        return self.state / MODULUS

    def __call__(self) -> float:
        return self.random()


def number_generator_factory(seed: int) -> NumberGenerator:
    """Return a zero-argument callable drawing from a fresh LcgPRNG."""
    return LcgPRNG(seed).random
