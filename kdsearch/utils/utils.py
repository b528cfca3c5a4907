import json
import logging
import math
import typing as t
from datetime import datetime


def timestamp_string():
    return datetime.now().strftime("%Y-%m-%d-%Hh%Mm%Ss_%f")


class KDSearchLog:
    def __init__(self, message: str, stage: str, timestamp: str | None = None):
        self.message = message
        self.stage = stage
        self.timestamp = timestamp if timestamp is not None else timestamp_string()

    def __str__(self):
        return "[{}]: '{}'".format(self.stage, self.message)

    def toJSON(self):
        return json.dumps(self, default=lambda o: o.__dict__, sort_keys=True, indent=4)


class KDSearchLogger(list[KDSearchLog]):
    """Keeps every log record in memory, optionally echoing it to stdout and to a
    standard library logger."""

    def __init__(
        self, printout: bool = False, std_logger: logging.Logger | None = None
    ):
        super(KDSearchLogger, self).__init__()
        self.printout = printout
        self.std_logger = std_logger

    def append(self, log: KDSearchLog):
        super(KDSearchLogger, self).append(log)
        if self.printout:
            print(log)
        if self.std_logger:
            self.std_logger.info(f"[kdsearch]:[{log.stage}]: {log.message}")

    def messages(self, stage: str | None = None) -> t.List[str]:
        return [log.message for log in self if stage is None or log.stage == stage]


def squared_distance(
    a: t.Any, b: t.Any, dimensions: t.Sequence[t.Hashable]
) -> float:
    dist2 = 0.0
    for dim in dimensions:
        diff = a[dim] - b[dim]
        dist2 += diff * diff
    return dist2


def euclidean_distance(
    a: t.Any, b: t.Any, dimensions: t.Sequence[t.Hashable]
) -> float:
    return math.sqrt(squared_distance(a, b, dimensions))
