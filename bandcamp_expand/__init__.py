"""
bandcamp-expand: unpacks Bandcamp download archives into a music library.
"""

__version__ = "1.0.0"
