"""
MindShield call protection service.

Watches for new call recordings, transcribes them, scores the transcript for
scam indicators and alerts the user about dangerous calls.
"""

__version__ = "1.0.0"
