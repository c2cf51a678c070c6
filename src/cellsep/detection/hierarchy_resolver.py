"""
Hierarchy Resolver Module
=========================

Reconstructs foreground objects from traced boundaries and their
containment hierarchy. A top-level boundary becomes an object when its
area, minus the area of its direct holes, reaches the minimum area.

Classes:
--------
- ObjectRole: Role assigned to every raw boundary
- ContainmentHierarchy: Four-link containment forest over raw boundaries
- LogicalObject: External boundary with its net area
- ResolutionResult: Objects plus the role of every raw boundary
- HierarchyResolver: Applies the resolution policy

Author: Cell Separation Metrics Team
Version: 1.0.0

Usage:
------
>>> resolver = HierarchyResolver(min_area=1.0)
>>> result = resolver.resolve(polygons, hierarchy)
>>> areas = [obj.net_area for obj in result.objects]
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from . import geometry
from ..utils.error_handler import HierarchyError


logger = logging.getLogger(__name__)

NO_LINK = -1


# ============================================================
# ENUMS AND DATA CLASSES
# ============================================================

class ObjectRole(Enum):
    """Role of a raw boundary after resolution."""
    INVALID = "invalid"    # Unclassified or rejected
    HOLE = "hole"          # Hole subtracted from its parent object
    OBJECT = "object"      # Genuine foreground object


class ContainmentHierarchy:
    """
    Containment forest stored as four integer links per boundary.

    Columns are parent, first child, next sibling and previous sibling;
    -1 means no link. Construction validates the links so traversal never
    leaves the array or loops.

    Parameters
    ----------
    links : array-like
        (N, 4) integer array in (parent, first_child, next, prev) order
    """

    PARENT = 0
    FIRST_CHILD = 1
    NEXT_SIBLING = 2
    PREV_SIBLING = 3

    def __init__(self, links):
        links = np.asarray(links, dtype=np.int64)
        if links.size == 0:
            links = np.empty((0, 4), dtype=np.int64)
        if links.ndim != 2 or links.shape[1] != 4:
            raise HierarchyError(f"Hierarchy must have shape (N, 4), got {links.shape}")
        self._links = links
        self.validate()

    # ========================================================
    # CONSTRUCTORS
    # ========================================================

    @classmethod
    def from_opencv(
        cls,
        hierarchy: Optional[np.ndarray],
        count: int
    ) -> 'ContainmentHierarchy':
        """
        Convert cv2.findContours output ([next, prev, first_child, parent]
        in a (1, N, 4) array) to link order.
        """
        if hierarchy is None:
            if count:
                raise HierarchyError(f"Missing hierarchy for {count} contours")
            return cls(np.empty((0, 4), dtype=np.int64))

        raw = np.asarray(hierarchy).reshape(-1, 4)
        if len(raw) != count:
            raise HierarchyError(
                f"Hierarchy has {len(raw)} entries for {count} contours"
            )
        return cls(raw[:, [3, 2, 0, 1]])

    @classmethod
    def from_parents(cls, parents: Sequence[int]) -> 'ContainmentHierarchy':
        """
        Build the forest from parent indices alone.

        Children of a node are chained as siblings in index order.
        """
        count = len(parents)
        links = np.full((count, 4), NO_LINK, dtype=np.int64)
        last_child = {}
        for index, parent in enumerate(parents):
            if parent < NO_LINK or parent >= count:
                raise HierarchyError(f"Parent link {parent} of node {index} out of range")
            links[index, cls.PARENT] = parent
            key = int(parent)
            previous = last_child.get(key)
            if previous is None:
                if parent != NO_LINK:
                    links[parent, cls.FIRST_CHILD] = index
            else:
                links[previous, cls.NEXT_SIBLING] = index
                links[index, cls.PREV_SIBLING] = previous
            last_child[key] = index
        return cls(links)

    @classmethod
    def flat(cls, count: int) -> 'ContainmentHierarchy':
        """Hierarchy where every boundary is top-level."""
        return cls.from_parents([NO_LINK] * count)

    # ========================================================
    # ACCESSORS
    # ========================================================

    def __len__(self) -> int:
        return len(self._links)

    @property
    def links(self) -> np.ndarray:
        """Read-only copy of the link array."""
        return self._links.copy()

    def parent(self, index: int) -> int:
        return int(self._links[index, self.PARENT])

    def first_child(self, index: int) -> int:
        return int(self._links[index, self.FIRST_CHILD])

    def next_sibling(self, index: int) -> int:
        return int(self._links[index, self.NEXT_SIBLING])

    def prev_sibling(self, index: int) -> int:
        return int(self._links[index, self.PREV_SIBLING])

    def is_top_level(self, index: int) -> bool:
        return self.parent(index) == NO_LINK

    def children(self, index: int) -> Iterator[int]:
        """Direct children, following the sibling chain from the first child."""
        child = self.first_child(index)
        while child != NO_LINK:
            yield child
            child = self.next_sibling(child)

    # ========================================================
    # VALIDATION
    # ========================================================

    def validate(self) -> None:
        """
        Check every link is in range and not self-referencing, that no
        sibling or parent chain loops, and that parent, child and sibling
        links agree with each other.

        Raises
        ------
        HierarchyError
            On the first malformed link found
        """
        count = len(self._links)
        if count == 0:
            return

        if self._links.min() < NO_LINK or self._links.max() >= count:
            bad = np.argwhere((self._links < NO_LINK) | (self._links >= count))[0]
            raise HierarchyError(
                f"Link {int(self._links[bad[0], bad[1]])} of node {int(bad[0])} "
                f"out of range for {count} contours"
            )

        self_links = self._links == np.arange(count)[:, None]
        if self_links.any():
            node = int(np.argwhere(self_links)[0][0])
            raise HierarchyError(f"Node {node} links to itself")

        self._check_acyclic(self.NEXT_SIBLING, 'sibling')
        self._check_acyclic(self.PARENT, 'parent')
        self._check_consistent()

    def _check_acyclic(self, column: int, name: str) -> None:
        # 0 = unvisited, 1 = on the current walk, 2 = known to terminate
        state = np.zeros(len(self._links), dtype=np.int8)
        for start in range(len(self._links)):
            walk = []
            node = start
            while node != NO_LINK and state[node] == 0:
                state[node] = 1
                walk.append(node)
                node = int(self._links[node, column])
            if node != NO_LINK and state[node] == 1:
                raise HierarchyError(f"Cycle in {name} chain through node {node}")
            state[walk] = 2

    def _check_consistent(self) -> None:
        nodes = np.arange(len(self._links))
        parent = self._links[:, self.PARENT]
        child = self._links[:, self.FIRST_CHILD]
        nxt = self._links[:, self.NEXT_SIBLING]
        prev = self._links[:, self.PREV_SIBLING]

        with_child = nodes[child != NO_LINK]
        bad = with_child[parent[child[with_child]] != with_child]
        if len(bad):
            node = int(bad[0])
            raise HierarchyError(
                f"First child {int(child[node])} of node {node} "
                f"has parent {int(parent[child[node]])}"
            )
        bad = with_child[prev[child[with_child]] != NO_LINK]
        if len(bad):
            node = int(bad[0])
            raise HierarchyError(
                f"First child {int(child[node])} of node {node} has a previous sibling"
            )

        with_next = nodes[nxt != NO_LINK]
        bad = with_next[prev[nxt[with_next]] != with_next]
        if len(bad):
            node = int(bad[0])
            raise HierarchyError(
                f"Inconsistent sibling links: next of node {node} is {int(nxt[node])}, "
                f"whose previous is {int(prev[nxt[node]])}"
            )
        with_prev = nodes[prev != NO_LINK]
        bad = with_prev[nxt[prev[with_prev]] != with_prev]
        if len(bad):
            node = int(bad[0])
            raise HierarchyError(
                f"Inconsistent sibling links: previous of node {node} is {int(prev[node])}, "
                f"whose next is {int(nxt[prev[node]])}"
            )
        bad = with_next[parent[nxt[with_next]] != parent[with_next]]
        if len(bad):
            node = int(bad[0])
            raise HierarchyError(
                f"Sibling nodes {node} and {int(nxt[node])} have different parents"
            )


@dataclass(frozen=True)
class LogicalObject:
    """
    A reconstructed foreground object.

    Attributes
    ----------
    index : int
        Position of the external boundary in the raw contour list
    shape : np.ndarray
        External boundary points
    net_area : float
        External area minus the area of its holes
    external_area : float
        Area enclosed by the external boundary
    hole_indices : Tuple[int, ...]
        Raw indices of the holes subtracted from this object
    """
    index: int
    shape: np.ndarray = field(repr=False, compare=False)
    net_area: float
    external_area: float = 0.0
    hole_indices: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ResolutionResult:
    """Objects reconstructed from one hierarchy snapshot."""
    objects: List[LogicalObject]
    roles: Tuple[ObjectRole, ...]

    @property
    def num_objects(self) -> int:
        return len(self.objects)

    def indices_with_role(self, role: ObjectRole) -> List[int]:
        """Raw indices tagged with the given role, in index order."""
        return [i for i, r in enumerate(self.roles) if r is role]


# ============================================================
# RESOLVER
# ============================================================

class HierarchyResolver:
    """
    Turns raw boundaries plus hierarchy into logical objects.

    Only top-level boundaries are candidate objects and only their direct
    children are treated as holes. A rejected boundary takes its holes down
    with it; nothing below the first nesting level is revisited.

    Attributes
    ----------
    min_area : float
        Minimum external and net area for a boundary to count as an object
    """

    DEFAULT_MIN_AREA = 1.0

    def __init__(self, min_area: float = DEFAULT_MIN_AREA):
        self.min_area = min_area

    def resolve(
        self,
        polygons: Sequence[np.ndarray],
        hierarchy: ContainmentHierarchy
    ) -> ResolutionResult:
        """
        Classify every raw boundary and build the logical objects.

        Parameters
        ----------
        polygons : sequence of np.ndarray
            Raw traced boundaries
        hierarchy : ContainmentHierarchy
            Links for the same boundaries, index for index

        Returns
        -------
        ResolutionResult
            Objects in raw index order and the role of every boundary
        """
        if len(polygons) != len(hierarchy):
            raise HierarchyError(
                f"{len(polygons)} contours but {len(hierarchy)} hierarchy entries"
            )

        roles = [ObjectRole.INVALID] * len(polygons)
        committed = {}

        for index, polygon in enumerate(polygons):
            if not hierarchy.is_top_level(index):
                continue
            area_external = geometry.area(polygon)
            if area_external < self.min_area:
                continue

            holes = []
            area_hole = 0.0
            for hole_index in hierarchy.children(index):
                hole_area = geometry.area(polygons[hole_index])
                if hole_area:
                    holes.append(hole_index)
                    area_hole += hole_area

            area_contour = area_external - area_hole
            if area_contour < self.min_area:
                logger.debug(
                    f"Rejected contour {index}: net area {area_contour:.1f} "
                    f"after {len(holes)} holes"
                )
                continue

            roles[index] = ObjectRole.OBJECT
            for hole_index in holes:
                roles[hole_index] = ObjectRole.HOLE
            committed[index] = LogicalObject(
                index=index,
                shape=polygon,
                net_area=area_contour,
                external_area=area_external,
                hole_indices=tuple(holes),
            )

        objects = [committed[i] for i in sorted(committed)]
        return ResolutionResult(objects=objects, roles=tuple(roles))


def resolve(
    polygons: Sequence[np.ndarray],
    hierarchy: ContainmentHierarchy,
    min_area: float = HierarchyResolver.DEFAULT_MIN_AREA
) -> ResolutionResult:
    """Resolve with a one-off HierarchyResolver."""
    return HierarchyResolver(min_area=min_area).resolve(polygons, hierarchy)
