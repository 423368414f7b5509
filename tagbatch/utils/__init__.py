"""
Shared helpers: file name templates and logging setup.
"""
