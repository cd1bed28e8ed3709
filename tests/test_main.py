"""Tests for the command line entry point."""

import json
from pathlib import Path

import main
from conftest import posix_only


@posix_only
def test_bulk_conversion_from_folder(tmp_path: Path, media_dir: Path, fake_ffmpeg_dir: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(main.StopFlag, "register_signal_handlers", lambda self: None)
    out = tmp_path / "out"

    code = main.main([
        "--config", str(tmp_path / "absent.json"),
        "--folder", str(media_dir),
        "--output", str(out),
        "--ffmpeg", str(fake_ffmpeg_dir),
    ])

    assert code == 0
    printed = capsys.readouterr().out
    assert "Successful Conversions:   3" in printed
    assert "Failed Conversions:       1" in printed
    assert (out / "one" / "playlist.m3u8").exists()
    assert (out / "song" / "playlist.m3u8").exists()


def test_no_input_files(tmp_path: Path) -> None:
    assert main.main(["--config", str(tmp_path / "absent.json")]) == 0


def test_invalid_config(tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"quality": "ultra"}))

    assert main.main(["--config", str(config), "movie.mp4"]) == 1


def test_output_implies_custom_mode() -> None:
    args = main.parse_args(["--output", "/srv/hls", "a.mp4"])
    assert args.custom_output_path == "/srv/hls"
    assert args.output_mode is None
    assert args.files == ["a.mp4"]


@posix_only
class TestSingleFile:
    """Tests for converting exactly one file."""

    def test_name_chooses_output_folder(self, tmp_path: Path, media_dir: Path, fake_ffmpeg_dir: Path, capsys, monkeypatch) -> None:
        monkeypatch.setattr(main.StopFlag, "register_signal_handlers", lambda self: None)

        code = main.main([
            "--config", str(tmp_path / "absent.json"),
            "--output-mode", "same-as-input",
            "--ffmpeg", str(fake_ffmpeg_dir),
            "--name", "clip",
            str(media_dir / "one.mp4"),
        ])

        assert code == 0
        assert (media_dir / "clip" / "playlist.m3u8").exists()
        printed = capsys.readouterr().out
        assert "File 1/1: clip" in printed
        assert f"[OK] {media_dir / 'one.mp4'} -> {media_dir / 'clip'}" in printed

    def test_defaults_to_file_name(self, tmp_path: Path, media_dir: Path, fake_ffmpeg_dir: Path, monkeypatch) -> None:
        monkeypatch.setattr(main.StopFlag, "register_signal_handlers", lambda self: None)
        out = tmp_path / "out"

        code = main.main([
            "--config", str(tmp_path / "absent.json"),
            "--output", str(out),
            "--ffmpeg", str(fake_ffmpeg_dir),
            str(media_dir / "three.mkv"),
        ])

        assert code == 0
        assert (out / "three" / "playlist.m3u8").exists()

    def test_failure_exit_code(self, tmp_path: Path, media_dir: Path, fake_ffmpeg_dir: Path, capsys, monkeypatch) -> None:
        monkeypatch.setattr(main.StopFlag, "register_signal_handlers", lambda self: None)

        code = main.main([
            "--config", str(tmp_path / "absent.json"),
            "--output", str(tmp_path / "out"),
            "--ffmpeg", str(fake_ffmpeg_dir),
            str(media_dir / "broken.mp4"),
        ])

        assert code == 1
        assert "Invalid data found when processing input" in capsys.readouterr().out


def test_name_with_several_files(tmp_path: Path) -> None:
    assert main.main([
        "--config", str(tmp_path / "absent.json"), "--name", "clip", "a.mp4", "b.mp4",
    ]) == 1


@posix_only
def test_file_listed_twice_gets_two_headers(tmp_path: Path, media_dir: Path, fake_ffmpeg_dir: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(main.StopFlag, "register_signal_handlers", lambda self: None)
    movie = str(media_dir / "one.mp4")

    code = main.main([
        "--config", str(tmp_path / "absent.json"),
        "--output", str(tmp_path / "out"),
        "--ffmpeg", str(fake_ffmpeg_dir),
        movie, movie,
    ])

    assert code == 0
    printed = capsys.readouterr().out
    assert "File 1/2: one" in printed
    assert "File 2/2: one" in printed
    assert (tmp_path / "out" / "one" / "playlist.m3u8").exists()
    assert (tmp_path / "out" / "one-1" / "playlist.m3u8").exists()
