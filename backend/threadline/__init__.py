"""
Threadline: hierarchy and search over branched conversations.
"""

__version__ = "1.0.0"
