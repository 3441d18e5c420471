"""Information abstraction: card buckets, custom raise tables and info-state records."""

from abstracted_poker.abstraction.clusters import ClusterTable, write_cluster_file
from abstracted_poker.abstraction.infoset import InfoStateKey, Observation
from abstracted_poker.abstraction.off_abstraction import OffAbstractionTable, freeze_raises

__all__ = [
    "ClusterTable",
    "InfoStateKey",
    "Observation",
    "OffAbstractionTable",
    "freeze_raises",
    "write_cluster_file",
]
