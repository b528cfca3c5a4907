import logging
import typing as t

import typer
from pydantic import ValidationError

from kdsearch.algorithms.kd_tree import Neighbor, SpatialNode
from kdsearch.data_models import (
    KDTreeConfigYamlModel,
    NeighborModel,
    kd_tree_config_from_yaml,
)
from kdsearch.exceptions import InvalidInputError
from kdsearch.utils import utils

app = typer.Typer()


def parse_query(query: str, dimensions: t.Sequence[str]) -> t.Dict[str, float]:
    values = [v.strip() for v in query.split(",") if v.strip()]
    if len(values) != len(dimensions):
        raise InvalidInputError(
            f"Query has {len(values)} coordinates but the tree has {len(dimensions)} dimensions"
        )
    try:
        return {dim: float(v) for dim, v in zip(dimensions, values)}
    except ValueError as e:
        raise InvalidInputError(f"Invalid query coordinates '{query}'") from e


def load_tree(config: KDTreeConfigYamlModel) -> SpatialNode:
    logger = utils.KDSearchLogger(
        printout=config.printout_logs, std_logger=logging.getLogger("kdsearch")
    )
    return SpatialNode.build(config.points, config.dimensions, logger=logger)


def echo_neighbors(neighbors: t.List[Neighbor], dimensions: t.Sequence[str]):
    for neighbor in neighbors:
        typer.echo(NeighborModel.from_neighbor(neighbor, dimensions).model_dump_json())


@app.command()
def nearest(
    config: str,
    query: t.Annotated[str, typer.Option("--query")],
    k: t.Annotated[int, typer.Option("--k")] = 1,
):
    try:
        cfg = kd_tree_config_from_yaml(config)
        tree = load_tree(cfg)
        neighbors = tree.nearest_k(parse_query(query, cfg.dimensions), k)
    except (InvalidInputError, ValidationError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    echo_neighbors(neighbors, cfg.dimensions)


@app.command()
def radius(
    config: str,
    query: t.Annotated[str, typer.Option("--query")],
    radius: t.Annotated[float, typer.Option("--radius")],
):
    try:
        cfg = kd_tree_config_from_yaml(config)
        tree = load_tree(cfg)
        neighbors = tree.nearest_within_radius(
            parse_query(query, cfg.dimensions), radius
        )
    except (InvalidInputError, ValidationError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    echo_neighbors(sorted(neighbors, key=lambda n: n.squared_distance), cfg.dimensions)


if __name__ == "__main__":
    app()
