"""Pricing and invariant engine for weighted and stable AMM pools."""

__version__ = "0.1.0"
