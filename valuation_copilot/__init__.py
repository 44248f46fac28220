"""
Valuation Copilot
A startup valuation calculator with a conversational assistant.
"""

from . import core
from . import models
from . import services

__version__ = '0.1.0'

__all__ = ['core', 'models', 'services']
