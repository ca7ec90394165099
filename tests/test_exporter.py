"""
Tests for playlist selection, export and media copies.
"""

import os

import pytest

from itunes_playlist_export.core.config import Config
from itunes_playlist_export.core.errors import (
    ConfigurationError,
    ExportIOError,
    PlaylistSelectionError,
)
from itunes_playlist_export.core.exporter import PlaylistExporter
from itunes_playlist_export.core.library import load_library


def playlist_lines(path):
    return path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def sample_library(library_file, media_files):
    files = media_files("a.mp3", "b.mp3", "c.mp3", "other/a.mp3")
    tracks = {
        str(i): {"Location": "file://" + files[name].as_posix(), "Name": name}
        for i, name in enumerate(["a.mp3", "b.mp3", "c.mp3", "other/a.mp3"], start=1)
    }
    playlists = [
        {"Name": "Library", "Master": True, "items": ["1", "2", "3", "4"]},
        {"Name": "Music", "Distinguished Kind": 4, "items": ["1", "2", "3"]},
        {"Name": "Folder", "Folder": True},
        {"Name": "Road Trip", "items": ["3", "1", "2", "1"]},
        {"Name": "Chill", "items": ["2"]},
        {"Name": "Same Names", "items": ["1", "4"]},
    ]
    return load_library(library_file(tracks, playlists)), files


def make_exporter(library, output_dir, **settings):
    config = Config.from_dict({"output_dir": str(output_dir), **settings})
    return PlaylistExporter(library, config)


class TestSelection:
    """Tests for choosing which playlists get exported."""

    def test_include_all_skips_folders_and_builtin(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, include_all=True)

        names = [p.name for p in exporter.select_playlists()]

        assert names == ["Road Trip", "Chill", "Same Names"]

    def test_include_builtin(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, include_all=True, include_builtin=True)

        names = [p.name for p in exporter.select_playlists()]

        assert names == ["Library", "Music", "Road Trip", "Chill", "Same Names"]

    def test_named_selection_keeps_library_order(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Chill", "Road Trip", "Chill"])

        assert [p.name for p in exporter.select_playlists()] == ["Road Trip", "Chill"]

    def test_named_builtin_playlist_is_exported(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Library"])

        assert [p.name for p in exporter.select_playlists()] == ["Library"]

    def test_regex_selection(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlist_regex="^(Ch|Mu)")

        assert [p.name for p in exporter.select_playlists()] == ["Chill"]

    def test_unknown_playlist_name(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Missing"])

        with pytest.raises(PlaylistSelectionError, match="Missing"):
            exporter.select_playlists()


class TestExport:
    """Tests for writing playlist files."""

    def test_writes_one_line_per_reference_in_order(self, sample_library, output_dir):
        library, files = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Road Trip"])

        results = exporter.export_all()

        playlist_file = output_dir / "Road Trip.m3u"
        assert results[0].playlist_file == playlist_file
        assert results[0].track_count == 4
        assert playlist_lines(playlist_file) == ["#EXTM3U"] + [
            str(files[name]) for name in ["c.mp3", "a.mp3", "b.mp3", "a.mp3"]
        ]

    def test_prefix_rewrite(self, sample_library, output_dir, music_dir):
        library, _ = sample_library
        exporter = make_exporter(
            library,
            output_dir,
            playlists=["Chill"],
            music_path="/mnt/music",
            music_path_orig=music_dir.as_posix(),
            file_separator="/",
        )

        exporter.export_all()

        assert playlist_lines(output_dir / "Chill.m3u") == ["#EXTM3U", "/mnt/music/b.mp3"]

    def test_file_separator(self, sample_library, output_dir):
        library, files = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Chill"], file_separator="\\")

        exporter.export_all()

        expected = files["b.mp3"].as_posix().replace("/", "\\")
        assert playlist_lines(output_dir / "Chill.m3u")[1] == expected

    def test_pls_format(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Chill"], output_format="pls")

        exporter.export_all()

        assert (output_dir / "Chill.pls").exists()

    def test_playlist_names_are_sanitized(self, library_file, media_files, output_dir):
        files = media_files("a.mp3")
        path = library_file(
            {"1": {"Location": "file://" + files["a.mp3"].as_posix()}},
            [{"Name": "AC/DC: Best?", "items": ["1"]}],
        )
        exporter = make_exporter(load_library(path), output_dir, include_all=True)

        exporter.export_all()

        assert (output_dir / "AC_DC_ Best_.m3u").exists()

    def test_duplicate_playlist_names_get_numbered(self, library_file, media_files, output_dir):
        files = media_files("a.mp3")
        path = library_file(
            {"1": {"Location": "file://" + files["a.mp3"].as_posix()}},
            [{"Name": "Mix", "items": ["1"]}, {"Name": "Mix", "items": ["1", "1"]}],
        )
        exporter = make_exporter(load_library(path), output_dir, include_all=True)

        exporter.export_all()

        assert len(playlist_lines(output_dir / "Mix.m3u")) == 2
        assert len(playlist_lines(output_dir / "Mix (2).m3u")) == 3

    def test_dry_run_writes_nothing(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(
            library, output_dir, include_all=True, copy_mode="PLAYLIST", dry_run=True
        )

        results = exporter.export_all()

        assert len(results) == 3
        assert all(r.dry_run for r in results)
        assert not output_dir.exists()

    def test_unknown_copy_mode(self, sample_library, output_dir):
        library, _ = sample_library
        with pytest.raises(ConfigurationError):
            make_exporter(library, output_dir, copy_mode="ITUNES")

    def test_output_dir_blocked_by_file(self, sample_library, tmp_path):
        library, _ = sample_library
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        exporter = make_exporter(library, blocker, include_all=True)

        with pytest.raises(ExportIOError, match="output directory"):
            exporter.export_all()


class TestCopyMode:
    """Tests for copying media files next to the playlists."""

    def test_playlist_copy(self, sample_library, output_dir):
        library, files = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Road Trip"], copy_mode="PLAYLIST")

        results = exporter.export_all()

        copy_dir = output_dir / "Road Trip"
        assert sorted(p.name for p in copy_dir.iterdir()) == ["a.mp3", "b.mp3", "c.mp3"]
        assert len(results[0].copied_files) == 3
        for name in ["a.mp3", "b.mp3", "c.mp3"]:
            assert (copy_dir / name).read_bytes() == files[name].read_bytes()
        assert playlist_lines(output_dir / "Road Trip.m3u") == ["#EXTM3U"] + [
            os.path.join(str(copy_dir), name) for name in ["c.mp3", "a.mp3", "b.mp3", "a.mp3"]
        ]

    def test_flat_copy(self, sample_library, output_dir):
        library, _ = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Road Trip", "Chill"], copy_mode="FLAT")

        exporter.export_all()

        assert (output_dir / "b.mp3").exists()
        assert not (output_dir / "Road Trip").exists()
        assert playlist_lines(output_dir / "Chill.m3u")[1] == os.path.join(str(output_dir), "b.mp3")

    def test_relative_output_dir_gives_absolute_entries(self, sample_library, tmp_path, monkeypatch):
        library, _ = sample_library
        monkeypatch.chdir(tmp_path)
        exporter = make_exporter(library, "out", playlists=["Chill"], copy_mode="PLAYLIST")

        exporter.export_all()

        expected = os.path.join(os.getcwd(), "out", "Chill", "b.mp3")
        assert playlist_lines(tmp_path / "out" / "Chill.m3u")[1] == expected
        assert os.path.isfile(expected)

    def test_same_basename_gets_numbered(self, sample_library, output_dir):
        library, files = sample_library
        exporter = make_exporter(library, output_dir, playlists=["Same Names"], copy_mode="PLAYLIST")

        exporter.export_all()

        copy_dir = output_dir / "Same Names"
        assert (copy_dir / "a.mp3").read_bytes() == files["a.mp3"].read_bytes()
        assert (copy_dir / "a (1).mp3").read_bytes() == files["other/a.mp3"].read_bytes()

    def test_existing_copy_is_kept(self, sample_library, output_dir):
        library, _ = sample_library
        make_exporter(library, output_dir, playlists=["Chill"], copy_mode="PLAYLIST").export_all()
        copied = output_dir / "Chill" / "b.mp3"
        before = copied.stat().st_mtime_ns

        make_exporter(library, output_dir, playlists=["Chill"], copy_mode="PLAYLIST").export_all()

        assert copied.stat().st_mtime_ns == before

    def test_failed_copy_is_fail_fast(self, library_file, media_files, output_dir, music_dir):
        files = media_files("first.mp3")
        path = library_file(
            {
                "1": {"Location": "file://" + files["first.mp3"].as_posix()},
                "2": {"Location": "file://" + (music_dir / "gone.mp3").as_posix()},
            },
            [{"Name": "Broken", "items": ["1", "2"]}],
        )
        exporter = make_exporter(load_library(path), output_dir, include_all=True, copy_mode="PLAYLIST")

        with pytest.raises(ExportIOError, match="gone.mp3"):
            exporter.export_all()

        assert (output_dir / "Broken" / "first.mp3").exists()
        assert not (output_dir / "Broken.m3u").exists()
