"""ladder: spaced-repetition scheduling engine."""

from ladder.consts import VERSION

__version__ = VERSION
