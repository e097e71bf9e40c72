"""
dnschecker — alerts when a hostname's DNS record no longer points at the
router's current WAN address.
"""

__version__ = "0.1.0"
