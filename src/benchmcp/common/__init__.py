"""
benchmcp common package

Shared constants, errors, scheduling and session bookkeeping.
"""
