# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Test doubles shared across the test modules."""

from collections import deque


class ScriptedRandom:
    """Random source that replays fixed sequences.

    ``ints`` feed :meth:`randint`, ``floats`` feed :meth:`random`.  Running
    out of values, or scripting an int outside the requested range, fails
    the test loudly.
    """

    def __init__(self, ints=(), floats=()):
        self.ints = deque(ints)
        self.floats = deque(floats)
        self.int_calls = []

    def randint(self, a, b):
        assert self.ints, f"unscripted randint({a}, {b})"
        v = self.ints.popleft()
        assert a <= v <= b, f"scripted {v} outside randint({a}, {b})"
        self.int_calls.append((a, b))
        return v

    def random(self):
        assert self.floats, "unscripted random()"
        v = self.floats.popleft()
        assert 0.0 <= v < 1.0
        return v

    @property
    def exhausted(self):
        return not self.ints and not self.floats
