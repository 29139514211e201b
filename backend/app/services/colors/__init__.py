"""
BrandColor Colors Module

Provides color normalization, secondary color derivation and image palette
extraction used to build brand color pairs.
"""

__version__ = "1.0.0"
