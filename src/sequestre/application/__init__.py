"""Application layer: escrow flows."""
