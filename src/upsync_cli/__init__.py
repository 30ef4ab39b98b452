"""
Upsync CLI - command-line access to the chunked document store.

Copyright (c) 2025 Goncharenko Anton aka alienxs2
License: MIT
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
