"""
Helper utilities for paths, filenames, formatting, and structured logging.
"""
