"""
Core domain models, mathematical primitives, and contracts.

This module contains the foundational building blocks that are independent
of the checkout flow and of any presentation layer.
"""
