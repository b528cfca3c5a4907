from kdsearch.algorithms.kd_tree import (
    IndexedPoint,
    Neighbor,
    SpatialNode,
    build,
    from_array,
)
from kdsearch.exceptions import EmptyTreeError, InvalidInputError

__all__ = [
    "IndexedPoint",
    "Neighbor",
    "SpatialNode",
    "build",
    "from_array",
    "EmptyTreeError",
    "InvalidInputError",
]
