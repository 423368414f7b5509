"""
Core application engine for dispatching actions.

This package contains the primary logic. The `ActionDispatcher` selects the
flow for the requested action and delegates to the renamer, the downloader
invoker, or one of the installed engines.
"""
