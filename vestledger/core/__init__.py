"""
Core domain models, integer arithmetic, and record contracts.

This module contains the foundational building blocks that are independent
of external systems (durable stores, clocks, networks).
"""
