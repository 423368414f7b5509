"""
tagbatch: command dispatch and job orchestration for batch audio-metadata work.
"""

__version__ = "1.0.0"
