from kdsearch import build
from kdsearch.utils import utils

points = [
    {"x": 0.0, "y": 0.0},
    {"x": 1.0, "y": 1.0},
    {"x": 2.0, "y": 2.0},
    {"x": 5.0, "y": 5.0},
]
logger = utils.KDSearchLogger(printout=True)
tree = build(points, ["x", "y"], logger=logger)

neighbors = tree.nearest_k({"x": 1.0, "y": 1.0}, k=2)
assert neighbors[0].point.idx == 1
assert neighbors[0].squared_distance == 0
assert {n.point.idx for n in neighbors[1:]} <= {0, 2}

ball = tree.nearest_within_radius({"x": 4.0, "y": 4.0}, 1.5)
assert [n.point.idx for n in ball] == [3]
