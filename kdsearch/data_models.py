import typing as t

import yaml
from pydantic import BaseModel, field_validator

from kdsearch.algorithms.kd_tree import Neighbor
from kdsearch.exceptions import InvalidInputError


# YAML MODELS


class KDTreeConfigYamlModel(BaseModel):
    dimensions: t.List[str]
    points: t.List[t.Dict[str, float]]
    printout_logs: bool = False

    @field_validator("dimensions")
    @classmethod
    def dimensions_not_empty(cls, value: t.List[str]) -> t.List[str]:
        if not value:
            raise ValueError("at least one dimension is required")
        return value


class NeighborModel(BaseModel):
    index: int
    """Position of the point in the input sequence the tree was built from"""

    point: t.Dict[str, float]

    squared_distance: float

    @classmethod
    def from_neighbor(
        cls, neighbor: Neighbor, dimensions: t.Sequence[str]
    ) -> "NeighborModel":
        return cls(
            index=neighbor.point.idx,
            point={dim: neighbor.point[dim] for dim in dimensions},
            squared_distance=neighbor.squared_distance,
        )


def kd_tree_config_from_yaml(file_path: str) -> KDTreeConfigYamlModel:
    with open(file_path, "r") as stream:
        try:
            config = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise InvalidInputError(f"Config file {file_path} is not valid YAML") from e
    if not isinstance(config, dict):
        raise InvalidInputError(f"Config file {file_path} does not contain a mapping")
    return KDTreeConfigYamlModel(**config)
