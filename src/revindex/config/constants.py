"""Configuration constants.

Values here are not user-configurable: storage naming and fixed cache
lifetimes.
"""

DATABASE_FILE_PREFIX = "log_"
"""Prefix of per-repository-root database files in the working directory."""

CACHE_FILE_SUFFIX = ".cache"
"""Suffix of result cache files in the working directory."""

CACHE_KEY_SECRET = b"revindex"
"""HMAC key used to shorten cache keys into file names."""

REMOTE_PROPERTY_CACHE_DURATION = "1 year"
"""Repository properties (bugtraq:logregex) rarely change."""

REMOTE_INFO_CACHE_DURATION = "1 year"
"""Root URL lookups for remote URLs never change."""
