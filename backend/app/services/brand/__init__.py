"""
BrandColor Brand Module

Resolves a primary/secondary brand color pair from a domain by combining
homepage meta hints, favicon palette extraction and color derivation.
"""

__version__ = "1.0.0"
