"""
Sequestre - client for a Solana token escrow program.

Builds, signs and submits Initialize, Exchange and Cancel transactions
and verifies the resulting on-chain state.
"""

__version__ = "0.1.0"
