"""
Utility modules for the slot booking backend.

This package contains shared utility functions and helpers used across
the application, including datetime utilities, logging setup, and
database query helpers.
"""
