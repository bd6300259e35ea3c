"""Solana conversational wallet agent."""

__version__ = "0.1.0"
