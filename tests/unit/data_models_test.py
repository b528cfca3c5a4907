import unittest

import pytest
from pydantic import ValidationError

from kdsearch.algorithms.kd_tree import build
from kdsearch.data_models import (
    KDTreeConfigYamlModel,
    NeighborModel,
    kd_tree_config_from_yaml,
)
from kdsearch.exceptions import InvalidInputError

CONFIG = """
dimensions: [x, y]
points:
  - {x: 0, y: 0}
  - {x: 1, y: 1}
  - {x: 2, y: 2}
  - {x: 5, y: 5}
"""


class TestDataModels:
    def test_config_from_yaml(self, tmp_path):
        path = tmp_path / "tree.yaml"
        path.write_text(CONFIG)
        config = kd_tree_config_from_yaml(str(path))
        assert config.dimensions == ["x", "y"]
        assert len(config.points) == 4
        assert config.points[3] == {"x": 5.0, "y": 5.0}
        assert config.printout_logs is False

    def test_config_not_a_mapping(self, tmp_path):
        path = tmp_path / "tree.yaml"
        path.write_text("")
        with pytest.raises(InvalidInputError):
            kd_tree_config_from_yaml(str(path))
        path.write_text("- 1\n- 2\n")
        with pytest.raises(InvalidInputError):
            kd_tree_config_from_yaml(str(path))
        path.write_text("dimensions: [x\n")
        with pytest.raises(InvalidInputError):
            kd_tree_config_from_yaml(str(path))

    def test_empty_dimensions(self):
        with pytest.raises(ValidationError):
            KDTreeConfigYamlModel(dimensions=[], points=[{"x": 0}])

    def test_neighbor_model(self):
        tree = build([{"x": 0, "y": 0, "label": "a"}, {"x": 3, "y": 4}], ["x", "y"])
        neighbor = tree.nearest({"x": 3, "y": 3})
        model = NeighborModel.from_neighbor(neighbor, ["x", "y"])
        assert model.index == 1
        assert model.point == {"x": 3.0, "y": 4.0}
        assert model.squared_distance == 1.0


if __name__ == "__main__":
    unittest.main()
