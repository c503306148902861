"""
Contact list HTTP service.
"""

__version__ = "0.1.0"
