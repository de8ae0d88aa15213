"""Tests for the directory walker."""

from __future__ import annotations

import os

import pytest

from mass_binding.plots.cancellation import CancellationToken, ScanCancelled
from mass_binding.plots.extractors import MassDBExtractor
from mass_binding.plots.keystore import Keystore
from mass_binding.plots.models import PlotFormat, ScanConfig
from mass_binding.plots.targets import TargetDerivationError, derive_massdb_target
from mass_binding.plots.walker import (
    DirectoryScanError,
    list_directory,
    walk_directories,
)
from tests.conftest import (
    FARMER_PK,
    OTHER_PK,
    POOL_PK,
    PUBKEY_2G,
    PUBKEY_3G,
    PUBKEY_G,
    massdb_filename,
)


class TestListDirectory:
    """Directory listing."""

    def test_sorted_names(self, tmp_path):
        for name in ("b", "c", "a"):
            (tmp_path / name).touch()
        assert list_directory(tmp_path) == ["a", "b", "c"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryScanError, match="cannot list directory"):
            list_directory(tmp_path / "missing")


class TestWalkMassDB:
    """Walking directories for native MassDB plots."""

    def test_collects_only_matching_plotted_files(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 32)
        plot_factory.massdb(d, PUBKEY_2G, 32, checkpoint=0)
        (d / "garbage.txt").write_text("x")

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]))

        assert result.total == 1
        assert result.plots[0].size == 32
        report = result.reports[0]
        assert (report.matched, report.included, report.excluded) == (2, 1, 1)

    def test_list_all_includes_unfinished(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 32)
        plot_factory.massdb(d, PUBKEY_2G, 32, checkpoint=0)

        config = ScanConfig.create(PlotFormat.DEFAULT, [d], list_all=True)

        assert walk_directories(config).total == 2

    def test_chia_files_ignored(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.chia(d)

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]))

        assert result.total == 0
        assert result.reports[0].matched == 0

    def test_corrupt_file_skipped_not_fatal(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 32)
        plot_factory.massdb(d, PUBKEY_2G, 32).write_bytes(b"truncated")

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]))

        assert result.total == 1
        assert result.reports[0].skipped == 1

    def test_matching_directory_entry_skipped(self, plot_factory):
        d = plot_factory.directory("plots")
        (d / massdb_filename(PUBKEY_3G, 32)).mkdir()

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]))

        assert result.total == 0
        assert result.reports[0].skipped == 1

    def test_order_follows_directories_then_names(self, plot_factory):
        first = plot_factory.directory("first")
        second = plot_factory.directory("second")
        plot_factory.massdb(first, PUBKEY_3G, 32, ordinal=2)
        plot_factory.massdb(first, PUBKEY_G, 32, ordinal=1)
        plot_factory.massdb(second, PUBKEY_2G, 32)

        result = walk_directories(
            ScanConfig.create(PlotFormat.DEFAULT, [second, first])
        )

        assert [r.directory.name for r in result.reports] == ["second", "first"]
        assert [plot.target for plot in result.plots] == [
            derive_massdb_target(PUBKEY_2G, 32),
            derive_massdb_target(PUBKEY_G, 32),
            derive_massdb_target(PUBKEY_3G, 32),
        ]

    def test_same_directory_twice_yields_duplicates(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 32)

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d, d]))

        assert result.total == 2
        assert result.plots[0] == result.plots[1]

    def test_missing_directory_fatal(self, plot_factory):
        d = plot_factory.directory("plots")
        config = ScanConfig.create(PlotFormat.DEFAULT, [d, d / "missing"])

        with pytest.raises(DirectoryScanError):
            walk_directories(config)

    def test_derivation_error_fatal(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 33)

        with pytest.raises(TargetDerivationError):
            walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]))

    @pytest.mark.skipif(os.name != "posix", reason="symlinks")
    def test_symlinked_plot_followed(self, plot_factory):
        source = plot_factory.directory("source")
        target_dir = plot_factory.directory("plots")
        plot = plot_factory.massdb(source, PUBKEY_G, 32)
        (target_dir / plot.name).symlink_to(plot)

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [target_dir]))

        assert result.total == 1


class TestWalkChia:
    """Walking directories for chia plots."""

    def test_keystore_filters_unowned(self, plot_factory):
        d = plot_factory.directory("chia")
        plot_factory.chia(d, seed=1)
        plot_factory.chia(d, seed=2, pool_public_key=OTHER_PK)
        keystore = Keystore(pool_keys=[POOL_PK], farmer_keys=[FARMER_PK])

        result = walk_directories(
            ScanConfig.create(PlotFormat.CHIA, [d], keystore=keystore)
        )

        assert result.total == 1
        assert result.reports[0].excluded == 1

    def test_no_keystore_includes_all(self, plot_factory):
        d = plot_factory.directory("chia")
        plot_factory.chia(d, seed=1)
        plot_factory.chia(d, seed=2, pool_public_key=OTHER_PK)

        result = walk_directories(ScanConfig.create(PlotFormat.CHIA, [d]))

        assert result.total == 2
        assert all(plot.format is PlotFormat.CHIA for plot in result.plots)


class TestWalkCancellation:
    """Cancellation polling."""

    def test_pre_cancelled_token_raises(self, plot_factory):
        d = plot_factory.directory("plots")
        plot_factory.massdb(d, PUBKEY_G, 32)
        token = CancellationToken()
        token.cancel("test")

        with pytest.raises(ScanCancelled, match="test"):
            walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]), token)

    def test_empty_directory_never_polls(self, plot_factory):
        d = plot_factory.directory("empty")
        token = CancellationToken()
        token.cancel()

        result = walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [d]), token)

        assert result.total == 0

    def test_cancel_after_first_file(self, plot_factory, monkeypatch):
        a = plot_factory.directory("a")
        b = plot_factory.directory("b")
        plot_factory.massdb(a, PUBKEY_G, 32)
        plot_factory.massdb(b, PUBKEY_2G, 32)
        plot_factory.massdb(b, PUBKEY_3G, 32)
        token = CancellationToken()
        seen = []
        extract = MassDBExtractor.extract

        def extract_then_cancel(self, path, config):
            seen.append(path.name)
            token.cancel("operator")
            return extract(self, path, config)

        monkeypatch.setattr(MassDBExtractor, "extract", extract_then_cancel)

        with pytest.raises(ScanCancelled, match="operator"):
            walk_directories(ScanConfig.create(PlotFormat.DEFAULT, [a, b]), token)

        assert seen == [massdb_filename(PUBKEY_G, 32)]
