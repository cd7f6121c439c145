"""
Test suite for swap-core

Contains:
- tests/unit/          : Unit tests for individual modules
"""
