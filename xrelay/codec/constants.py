"""
Checkpoint message wire constants.
"""

VERSION = 2
LEGACY_VERSION = 1

MIN_CID_LENGTH = 40
MAX_CID_LENGTH = 100

MAX_MESSAGE_AGE = 7 * 24 * 60 * 60
MAX_CLOCK_SKEW = 5 * 60

# Head words per layout: legacy has no trailing revoked flag
LEGACY_HEAD_WORDS = 7
HEAD_WORDS = 8
