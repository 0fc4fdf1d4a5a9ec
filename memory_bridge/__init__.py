"""
memory-bridge: rolling per-project session memory.

Distills each work session into a short summary and recalls the most
recent summaries when a new session starts in the same project.
"""

__version__ = "0.1.0"
