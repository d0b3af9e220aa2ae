"""Human-readable order number generation.

Order numbers look like ``ORD-1700000000000-042``: a millisecond epoch
timestamp followed by a zero-padded random value in ``[0, 1000)``.
The format alone does not guarantee uniqueness; the database enforces
it and ``OrderService`` regenerates on collision.
"""

import random
import re
import time
from typing import Callable, Optional

ORDER_NUMBER_RE = re.compile(r"^ORD-\d{13}-\d{3}$")


class OrderNumberGenerator:
    """Generate order numbers from an injected clock and RNG.

    Args:
        clock: Callable returning seconds since the epoch as a float.
            Defaults to ``time.time``.
        rng: ``random.Random`` instance used for the 3-digit suffix.
            Defaults to a freshly seeded instance.
    """

    PREFIX = "ORD"

    def __init__(self, clock: Callable[[], float] = time.time, rng: Optional[random.Random] = None):
        self.clock = clock
        self.rng = rng or random.Random()

    def generate(self) -> str:
        millis = int(self.clock() * 1000)
        suffix = self.rng.randrange(1000)
        return f"{self.PREFIX}-{millis:013d}-{suffix:03d}"
