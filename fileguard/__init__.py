"""
FileGuard: watch a single path with inotify and act on one configured event.

Provides a CLI and a library API: decode inotify read buffers, classify
events, and run a command or append a log line when the trigger event occurs.
"""

__version__ = "0.1.0"
