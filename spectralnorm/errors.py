from __future__ import annotations
import operator


class InvalidSizeError(ValueError):
    """Problem size is not a positive integer."""

    def __init__(self, n: object):
        super().__init__(f"n must be a positive integer, got {n!r}")
        self.n = n


class ChecksumMismatch(RuntimeError):
    """Raised by the benchmark harness when a run does not reproduce the expected checksum."""

    def __init__(self, computed: float, expected: float):
        super().__init__(f"bad checksum: {computed!r} vs {expected!r}")
        self.computed = computed
        self.expected = expected


def check_size(n: object) -> int:
    # bool is an int subclass but never a meaningful size
    if isinstance(n, bool):
        raise InvalidSizeError(n)
    try:
        size = operator.index(n)
    except TypeError:
        raise InvalidSizeError(n) from None
    if size < 1:
        raise InvalidSizeError(n)
    return size
