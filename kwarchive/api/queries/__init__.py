"""
Keyword Query Modules

Organized archive querying utilities split by concern:
- metadata.py: keyword type resolution
- fetch.py: count-then-fetch sample retrieval
- conversions.py: scalar unit conversions
- transforms.py: derivative and delta transforms
- frames.py: response frames and fallbacks
- pipeline.py: per-query orchestration over a batch
- catalog.py: services/keywords listing and health
"""

from .series import KeywordKind, Series
from .metadata import resolve_kind
from .fetch import fetch_series
from .conversions import UnitConversion, convert
from .transforms import Transform, apply_transform
from .frames import DataResponse, Frame, boundary_frame, build_frame
from .pipeline import CancelScope, QueryPipeline
from .catalog import HealthResult, check_health, list_keywords, list_services

__all__ = [
    # Types
    'KeywordKind',
    'Series',
    'Frame',
    'DataResponse',

    # Pipeline stages
    'resolve_kind',
    'fetch_series',
    'UnitConversion',
    'convert',
    'Transform',
    'apply_transform',
    'build_frame',
    'boundary_frame',

    # Orchestration
    'CancelScope',
    'QueryPipeline',

    # Catalog
    'list_services',
    'list_keywords',
    'check_health',
    'HealthResult',
]
