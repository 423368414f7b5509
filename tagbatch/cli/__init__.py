"""
Command-line surface: the Typer application, Rich formatters and the
progress monitor.
"""
