"""
Services package.
"""

from .conversation_service import ConversationService, ConversationRelationships

__all__ = ["ConversationService", "ConversationRelationships"]
