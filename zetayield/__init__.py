"""ZetaYield: strategy compilation and cross-chain execution tracking for ZetaChain."""

__version__ = "0.1.0"
