"""
HTTP service storing project records keyed by package name, with a
region-gated read endpoint driven by client IP geolocation.
"""

__version__ = "0.1.0"
