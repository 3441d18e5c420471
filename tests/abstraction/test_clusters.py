"""Tests for cluster tables and cluster files."""

import logging

import numpy as np
import pytest

from abstracted_poker.abstraction.clusters import ClusterTable, write_cluster_file
from abstracted_poker.shared.errors import ClusterFileError


class TestClusterTable:
    """Tests for bucket lookup."""

    def test_placeholder_without_files(self):
        table = ClusterTable({1: 169, 2: 1000})
        assert not table.has_table(1)
        assert table.cluster(1, 168) == 168
        assert table.cluster(2, 450) == 50

    def test_custom_placeholder_modulus(self):
        table = ClusterTable({1: 169}, placeholder_buckets=10)
        assert table.cluster(1, 37) == 7

    def test_loads_configured_file(self, tmp_path):
        path = write_cluster_file(tmp_path / "round2.bin", [3, 1, 4, 1, 5, 9])
        table = ClusterTable({1: 6, 2: 6}, {2: str(path)})
        assert table.has_table(2)
        assert not table.has_table(1)
        assert [table.cluster(2, i) for i in range(6)] == [3, 1, 4, 1, 5, 9]
        assert table.cluster(1, 5) == 5

    def test_missing_file_falls_back(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            table = ClusterTable({1: 6}, {1: str(tmp_path / "missing.bin")})
        assert not table.has_table(1)
        assert table.cluster(1, 4) == 4
        assert "not found" in caplog.text

    def test_placeholder_rounds_logged(self, tmp_path, caplog):
        path = write_cluster_file(tmp_path / "round2.bin", [0] * 6)
        with caplog.at_level(logging.DEBUG, logger="abstracted_poker.abstraction.clusters"):
            ClusterTable({1: 6, 2: 6, 3: 6}, {2: str(path)}, placeholder_buckets=7)
        placeholder = [r.getMessage() for r in caplog.records if "placeholder" in r.getMessage()]
        assert placeholder == [
            "Round 1 uses placeholder buckets (index % 7)",
            "Round 3 uses placeholder buckets (index % 7)",
        ]

    def test_size_mismatch(self, tmp_path):
        path = write_cluster_file(tmp_path / "short.bin", [0, 1, 2])
        with pytest.raises(ClusterFileError):
            ClusterTable({1: 6}, {1: path})

    def test_file_for_unknown_round(self, tmp_path):
        path = write_cluster_file(tmp_path / "r3.bin", [0] * 6)
        with pytest.raises(ClusterFileError):
            ClusterTable({1: 6}, {3: path})

    def test_unknown_round_lookup(self):
        with pytest.raises(ValueError):
            ClusterTable({1: 6}).cluster(2, 0)

    def test_index_outside_loaded_table(self, tmp_path):
        path = write_cluster_file(tmp_path / "r1.bin", [0] * 6)
        table = ClusterTable({1: 6}, {1: path})
        with pytest.raises(ValueError):
            table.cluster(1, 6)

    def test_placeholder_buckets_positive(self):
        with pytest.raises(ValueError):
            ClusterTable({1: 6}, placeholder_buckets=0)


class TestWriteClusterFile:
    """Tests for writing cluster files."""

    def test_writes_one_byte_per_index(self, tmp_path):
        path = write_cluster_file(tmp_path / "nested" / "r1.bin", np.arange(200) % 7)
        data = path.read_bytes()
        assert len(data) == 200
        assert data[8] == 1

    def test_progress_bar_option(self, tmp_path):
        path = write_cluster_file(tmp_path / "r1.bin", [1, 2, 3], show_progress=True)
        assert path.read_bytes() == bytes([1, 2, 3])

    def test_rejects_values_outside_byte(self, tmp_path):
        with pytest.raises(ValueError):
            write_cluster_file(tmp_path / "bad.bin", [0, 256])

    def test_rejects_nested_buckets(self, tmp_path):
        with pytest.raises(ValueError):
            write_cluster_file(tmp_path / "bad.bin", [[0, 1], [2, 3]])
