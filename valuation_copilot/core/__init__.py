"""
Core package for the valuation copilot.
Contains configuration, caching, the AI gateway and deal storage backends.
"""

from .config import (
    Sector,
    Region,
    ConversationStep,
    RISK_CATEGORIES
)
from .database import DatabaseConnection, KeyValueStore, InMemoryKeyValueStore, MongoKeyValueStore
from .llm_service import LLMService

__all__ = [
    'Sector',
    'Region',
    'ConversationStep',
    'RISK_CATEGORIES',
    'DatabaseConnection',
    'KeyValueStore',
    'InMemoryKeyValueStore',
    'MongoKeyValueStore',
    'LLMService'
]
