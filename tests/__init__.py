"""
Test suite for the checkout core

Contains:
- tests/unit/          : Unit tests for individual modules and checkout scenarios
"""
