"""
Test suite for vestledger

Contains:
- tests/unit/          : Unit tests for individual modules and the engine facade
"""
