"""
Cross-Chain Checkpoint Relay

Reception engine for content checkpoints delivered over a cross-chain transport:
codec, trusted emitters, replay protection and a uniqueness-indexed store.
"""

__version__ = "0.1.0"
