"""Region Query Processor

Main processor implementation for the region query module.
"""

from .region_query_processor import RegionQueryProcessor, processing_stage

__all__ = ['RegionQueryProcessor', 'processing_stage']
