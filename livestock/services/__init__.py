"""
Livestock services module
"""

from .fact_store import FactStore, Subject, fact_store
from .tag_resolver import TagResolver
from .classification import ClassificationEngine, Classification, HerdSummary

__all__ = [
    'FactStore',
    'Subject',
    'fact_store',
    'TagResolver',
    'ClassificationEngine',
    'Classification',
    'HerdSummary',
]
