"""
xrelay CLI - Cross-chain checkpoint reception

Commands:
- xrelay emitter add/remove/list - Trusted emitter administration
- xrelay receive - Process one transport envelope
- xrelay checkpoint get/by-cid/exists/stats/verify-log - Stored checkpoint queries
- xrelay codec encode/decode - Checkpoint payload tools
- xrelay envelope keygen/build - Guardian keys and signed envelopes
"""

from xrelay import __version__

__all__ = ["__version__"]
