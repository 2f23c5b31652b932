"""
HTTP surface for media-serve.

A FastAPI application with a single catch-all GET route that answers every
request with one rendered image.
"""

__version__ = "1.0.0"
