"""
Detection Module
================

Turns binary masks into measured objects.

Classes:
--------
- ContourTracer: Boundary tracing with OpenCV
- ContainmentHierarchy: Four-link containment forest
- HierarchyResolver: Object reconstruction from boundaries and holes

Enums:
------
- ContourMode: Contour retrieval modes
- ContourApproximation: Contour approximation methods
- ObjectRole: Role of each traced boundary

Data Classes:
-------------
- TraceResult: Boundaries and hierarchy of one mask
- LogicalObject: External boundary with its net area
- ResolutionResult: Objects plus boundary roles
"""

from .contour_tracer import (
    ContourTracer,
    ContourMode,
    ContourApproximation,
    TraceResult
)

from .hierarchy_resolver import (
    ContainmentHierarchy,
    HierarchyResolver,
    ObjectRole,
    LogicalObject,
    ResolutionResult,
    resolve
)

from .object_filter import filter_objects

__all__ = [
    # Tracing
    'ContourTracer',
    'ContourMode',
    'ContourApproximation',
    'TraceResult',
    # Resolution
    'ContainmentHierarchy',
    'HierarchyResolver',
    'ObjectRole',
    'LogicalObject',
    'ResolutionResult',
    'resolve',
    # Filtering
    'filter_objects'
]
