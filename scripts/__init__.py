"""
Scripts package for the AD user export.

This package contains the command-line entry points.
"""
