import typing as t


class InvalidInputError(ValueError):
    """Raised when a build or query argument violates the tree's preconditions."""

    def __init__(self, message: str, *args: object):
        super().__init__(message, *args)
        self.message = message


class EmptyTreeError(LookupError):
    pass


class MissingDimensionError(InvalidInputError):
    def __init__(self, dimension: t.Hashable, point_index: int | None = None):
        if point_index is None:
            message = f"Query point has no coordinate for dimension {dimension!r}"
        else:
            message = f"Point {point_index} has no coordinate for dimension {dimension!r}"
        super().__init__(message)
        self.dimension = dimension
        self.point_index = point_index
