"""
Centralized mock objects for testing.

This package provides reusable mock factories for agent sockets, reducing
code duplication across test files.
"""
