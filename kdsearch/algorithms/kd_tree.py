import bisect
import math
import numbers
import typing as t
from collections.abc import Mapping

import numpy as np
import numpy.typing as npt

from kdsearch.exceptions import EmptyTreeError, InvalidInputError, MissingDimensionError
from kdsearch.utils import utils

Dimension = t.Hashable


class IndexedPoint(Mapping):
    """A caller-supplied point paired with its position in the input sequence.

    Coordinates are read through ``point[dimension]``, so ``coords`` may be a dict
    keyed by dimension names or a sequence indexed by integer dimensions.
    """

    __slots__ = ("coords", "idx")

    def __init__(self, coords: t.Any, idx: int):
        self.coords = coords
        self.idx = idx

    def __getitem__(self, key: Dimension) -> t.Any:
        return self.coords[key]

    def __iter__(self) -> t.Iterator[Dimension]:
        if isinstance(self.coords, Mapping):
            return iter(self.coords)
        return iter(range(len(self.coords)))

    def __len__(self) -> int:
        return len(self.coords)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedPoint):
            return NotImplemented
        if self.idx != other.idx:
            return False
        return self.coords is other.coords or bool(np.all(self.coords == other.coords))

    def __hash__(self) -> int:
        return hash(self.idx)

    def __repr__(self):
        return f"IndexedPoint(idx={self.idx}, coords={self.coords!r})"


class Neighbor(t.NamedTuple):
    point: IndexedPoint
    squared_distance: float


def _rank(neighbor: Neighbor) -> t.Tuple[float, int]:
    # equal distances are ordered by original index
    return (neighbor.squared_distance, neighbor.point.idx)


def _read_coordinate(point: t.Any, dim: Dimension, point_index: int | None) -> t.Any:
    try:
        value = point[dim]
    except (KeyError, IndexError, TypeError) as e:
        raise MissingDimensionError(dim, point_index) from e
    if not isinstance(value, numbers.Real) or math.isnan(value):
        where = "Query point" if point_index is None else f"Point {point_index}"
        raise InvalidInputError(
            f"{where} has a non-numeric coordinate {value!r} for dimension {dim!r}"
        )
    return value


class SpatialNode:
    """One node of a k-d tree, and the root of the subtree below it.

    The split dimension of a node is not stored: it is ``depth % ndim`` and is
    passed down every recursive call as ``this_dim``. Use :meth:`build` to create
    a tree; the constructor assumes already indexed and validated points.
    """

    def __init__(
        self,
        points: t.Sequence[IndexedPoint],
        dimensions: t.Tuple[Dimension, ...],
        this_dim: int = 0,
    ):
        self.ndim = len(dimensions)
        self.dimensions = dimensions

        if len(points) > 1:
            median, left, right = self._split_at_median(points, this_dim)
        else:
            median, left, right = points[0], [], []

        self.point = median

        next_dim = (this_dim + 1) % self.ndim
        self.left: SpatialNode | None = (
            SpatialNode(left, dimensions, next_dim) if left else None
        )
        self.right: SpatialNode | None = (
            SpatialNode(right, dimensions, next_dim) if right else None
        )

    @classmethod
    def build(
        cls,
        points: t.Iterable[t.Any],
        dimensions: t.Iterable[Dimension],
        logger: utils.KDSearchLogger | None = None,
    ) -> "SpatialNode":
        """Build a balanced k-d tree over ``points``.

        Every point gets the index it has in ``points``; results of later queries
        carry it as ``neighbor.point.idx``. The caller's sequence is not modified.
        """
        dims = tuple(dimensions)
        if not dims:
            raise InvalidInputError("At least one dimension is required")
        pts = list(points)
        if not pts:
            raise InvalidInputError("Cannot build a k-d tree from an empty point set")
        for i, p in enumerate(pts):
            for dim in dims:
                _read_coordinate(p, dim, i)

        root = cls([IndexedPoint(p, i) for i, p in enumerate(pts)], dims)
        if logger is not None:
            logger.append(
                utils.KDSearchLog(
                    f"Built k-d tree over {len(pts)} points in {len(dims)} dimensions, depth {root.depth()}",
                    "build",
                )
            )
        return root

    def __len__(self) -> int:
        count = 1
        if self.left is not None:
            count += len(self.left)
        if self.right is not None:
            count += len(self.right)
        return count

    def __iter__(self) -> t.Iterator[IndexedPoint]:
        """Pre-order traversal of the stored points."""
        yield self.point
        if self.left is not None:
            yield from self.left
        if self.right is not None:
            yield from self.right

    def depth(self) -> int:
        return 1 + max(
            self.left.depth() if self.left is not None else 0,
            self.right.depth() if self.right is not None else 0,
        )

    def nearest_within_radius(
        self, query_point: t.Any, radius: float
    ) -> t.List[Neighbor]:
        """Find all points of the tree that lie within ``radius`` of ``query_point``.

        The order of the result is unspecified.
        """
        self._check_query(query_point)
        if not isinstance(radius, numbers.Real) or not radius >= 0:
            raise InvalidInputError(f"Radius must be non-negative, got {radius!r}")
        return self._nearest_within_radius(query_point, radius * radius, 0)

    def nearest_k(self, query_point: t.Any, k: int = 1) -> t.List[Neighbor]:
        """Find the ``k`` points nearest to ``query_point``, closest first.

        Returns every point of the tree when it holds fewer than ``k``.
        """
        self._check_query(query_point)
        if not isinstance(k, numbers.Integral) or k < 1:
            raise InvalidInputError(f"k must be a positive integer, got {k!r}")
        k = int(k)
        return self._nearest_k(query_point, k, [], 0)

    def nearest(self, query_point: t.Any) -> Neighbor:
        neighbors = self.nearest_k(query_point, 1)
        if not neighbors:
            raise EmptyTreeError("The k-d tree holds no points")
        return neighbors[0]

    def _nearest_within_radius(
        self, query_point: t.Any, R_squared: float, this_dim: int
    ) -> t.List[Neighbor]:
        squared_distance_to_point = self._dist2(self.point, query_point)
        distance_to_hyperplane = query_point[
            self.dimensions[this_dim]
        ] - self._get_hyperplane(this_dim)

        ball: t.List[Neighbor] = []
        if squared_distance_to_point <= R_squared:
            ball.append(Neighbor(self.point, squared_distance_to_point))

        this_half, other_half = self._halves(distance_to_hyperplane)
        next_dim = (this_dim + 1) % self.ndim

        if this_half is not None:
            ball.extend(this_half._nearest_within_radius(query_point, R_squared, next_dim))

        # Points equal to the pivot on this dimension may sit in either half, so a
        # ball touching the hyperplane still has to look across it.
        squared_distance_to_hyperplane = distance_to_hyperplane * distance_to_hyperplane
        if other_half is not None and squared_distance_to_hyperplane <= R_squared:
            ball.extend(
                other_half._nearest_within_radius(query_point, R_squared, next_dim)
            )

        return ball

    def _nearest_k(
        self,
        query_point: t.Any,
        k: int,
        neighs: t.List[Neighbor],
        this_dim: int,
    ) -> t.List[Neighbor]:
        distance_to_hyperplane = query_point[
            self.dimensions[this_dim]
        ] - self._get_hyperplane(this_dim)
        this_half, other_half = self._halves(distance_to_hyperplane)
        next_dim = (this_dim + 1) % self.ndim

        # Search the half containing the query point first, so the current node is
        # compared against the closest candidates found so far.
        if this_half is not None:
            neighs = this_half._nearest_k(query_point, k, neighs, next_dim)

        squared_distance_to_point = self._dist2(self.point, query_point)
        if len(neighs) < k or squared_distance_to_point < neighs[k - 1].squared_distance:
            neighs = self._insert_sorted(
                neighs, Neighbor(self.point, squared_distance_to_point)
            )
        del neighs[k:]

        if other_half is not None:
            R_squared = neighs[-1].squared_distance if neighs else math.inf
            squared_distance_to_hyperplane = distance_to_hyperplane * distance_to_hyperplane
            if len(neighs) < k or squared_distance_to_hyperplane < R_squared:
                neighs = other_half._nearest_k(query_point, k, neighs, next_dim)

        del neighs[k:]
        return neighs

    def _halves(
        self, distance_to_hyperplane: float
    ) -> t.Tuple["SpatialNode | None", "SpatialNode | None"]:
        if distance_to_hyperplane < 0:
            return self.left, self.right
        return self.right, self.left

    def _check_query(self, query_point: t.Any) -> None:
        for dim in self.dimensions:
            _read_coordinate(query_point, dim, None)

    def _get_hyperplane(self, this_dim: int) -> t.Any:
        return self.point[self.dimensions[this_dim]]

    def _split_at_median(
        self, points: t.Sequence[IndexedPoint], this_dim: int
    ) -> t.Tuple[IndexedPoint, t.List[IndexedPoint], t.List[IndexedPoint]]:
        """Sort a copy of ``points`` along ``this_dim`` and split it around the
        element at ``len // 2``."""
        dim = self.dimensions[this_dim]
        pts = sorted(points, key=lambda p: (p[dim], p.idx))
        middle = len(pts) // 2
        return pts[middle], pts[:middle], pts[middle + 1 :]

    def _dist2(self, a: t.Any, b: t.Any) -> float:
        return utils.squared_distance(a, b, self.dimensions)

    @staticmethod
    def _insert_sorted(neighs: t.List[Neighbor], neighbor: Neighbor) -> t.List[Neighbor]:
        bisect.insort(neighs, neighbor, key=_rank)
        return neighs


def build(
    points: t.Iterable[t.Any],
    dimensions: t.Iterable[Dimension],
    logger: utils.KDSearchLogger | None = None,
) -> SpatialNode:
    return SpatialNode.build(points, dimensions, logger=logger)


def from_array(
    array: npt.ArrayLike,
    dimensions: t.Sequence[Dimension] | None = None,
    logger: utils.KDSearchLogger | None = None,
) -> SpatialNode:
    """Build a tree from an ``(n_points, n_dims)`` array.

    Dimension keys default to the column indices.
    """
    arr = np.asarray(array, dtype=float)
    if arr.ndim != 2:
        raise InvalidInputError(
            f"Expected a 2-D array of shape (n_points, n_dims), got shape {arr.shape}"
        )
    if dimensions is None:
        dimensions = list(range(arr.shape[1]))
    elif len(dimensions) != arr.shape[1]:
        raise InvalidInputError(
            f"Got {len(dimensions)} dimension names for an array with {arr.shape[1]} columns"
        )
    points = [dict(zip(dimensions, row)) for row in arr.tolist()]
    return SpatialNode.build(points, dimensions, logger=logger)
