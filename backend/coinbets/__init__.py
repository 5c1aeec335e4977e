"""Coinbets: transactional coin ledger for multi-tenant wagering."""

__version__ = "0.1.0"
__author__ = "Coinbets Team"

__all__ = ["__version__", "__author__"]
