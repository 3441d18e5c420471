"""
Card abstraction buckets per round.

A cluster file is a flat binary file holding one unsigned byte (the bucket id)
per canonical hand index of its round. Rounds without a file use the
placeholder bucketing ``index % placeholder_buckets``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

import numpy as np
from tqdm import tqdm

from abstracted_poker.shared.errors import ClusterFileError

logger = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_BUCKETS = 200
_WRITE_CHUNK = 1 << 20


class ClusterTable:
    """
    Bucket lookup for every round of a game.

    Args:
        round_sizes: 1-based round -> number of canonical hands in that round.
        cluster_files: 1-based round -> path of its cluster file.
        placeholder_buckets: Modulus of the fallback bucketing.

    Raises:
        ClusterFileError: If a cluster file exists but its length differs from
            the round size, or names a round the game does not have.
    """

    def __init__(
        self,
        round_sizes: Mapping[int, int],
        cluster_files: Mapping[int, str | Path] | None = None,
        placeholder_buckets: int = DEFAULT_PLACEHOLDER_BUCKETS,
    ):
        if placeholder_buckets <= 0:
            raise ValueError(f"placeholder_buckets must be positive, got {placeholder_buckets}")
        self.round_sizes = dict(round_sizes)
        self.placeholder_buckets = placeholder_buckets
        self._tables: dict[int, np.ndarray] = {}

        for round_num, path in sorted((cluster_files or {}).items()):
            if round_num not in self.round_sizes:
                raise ClusterFileError(
                    f"Cluster file {path} given for round {round_num}, but the game has "
                    f"rounds {sorted(self.round_sizes)}"
                )
            table = self._load(Path(path), self.round_sizes[round_num])
            if table is not None:
                self._tables[round_num] = table

        for round_num in sorted(set(self.round_sizes) - set(self._tables)):
            logger.debug(
                f"Round {round_num} uses placeholder buckets (index % {placeholder_buckets})"
            )

    @staticmethod
    def _load(path: Path, expected: int) -> np.ndarray | None:
        if not path.exists():
            logger.warning(f"Cluster file {path} not found, using placeholder buckets")
            return None
        actual = path.stat().st_size
        if actual != expected:
            raise ClusterFileError(
                f"Cluster file {path} holds {actual} entries, expected {expected}"
            )
        logger.info(f"Loading {expected} cluster ids from {path}")
        return np.memmap(path, dtype=np.uint8, mode="r", shape=(expected,))

    def has_table(self, round_num: int) -> bool:
        return round_num in self._tables

    def cluster(self, round_num: int, index: int) -> int:
        """
        Bucket of canonical hand ``index`` in 1-based ``round_num``.

        Raises:
            ValueError: If the round is unknown or the index is outside a
                loaded table.
        """
        if round_num not in self.round_sizes:
            raise ValueError(f"Round {round_num} outside {sorted(self.round_sizes)}")
        table = self._tables.get(round_num)
        if table is None:
            return index % self.placeholder_buckets
        if not 0 <= index < len(table):
            raise ValueError(f"Index {index} outside cluster table of round {round_num}")
        return int(table[index])


def write_cluster_file(
    path: str | Path,
    buckets: np.ndarray | list[int],
    show_progress: bool = False,
) -> Path:
    """
    Write bucket ids as a flat uint8 cluster file.

    Args:
        path: Destination file; parent directories are created.
        buckets: One bucket id (0-255) per canonical index, in index order.
        show_progress: Show a progress bar while writing.

    Returns:
        The written path.
    """
    values = np.asarray(buckets)
    if values.ndim != 1:
        raise ValueError(f"Buckets must be one-dimensional, got shape {values.shape}")
    if values.size and (values.min() < 0 or values.max() > 255):
        raise ValueError("Bucket ids must fit in one unsigned byte")
    data = values.astype(np.uint8)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        for start in tqdm(
            range(0, len(data), _WRITE_CHUNK),
            desc=f"Writing {path.name}",
            unit="chunk",
            disable=not show_progress,
        ):
            f.write(data[start : start + _WRITE_CHUNK].tobytes())
    return path
