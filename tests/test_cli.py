import json

import pytest

from image_counter.cli import main


@pytest.fixture
def album(tmp_path):
    (tmp_path / "cover.png").write_bytes(b"")
    trip = tmp_path / "trip"
    trip.mkdir()
    (trip / "beach.jpg").write_bytes(b"")
    (trip / "sunset.jpg").write_bytes(b"")
    return tmp_path


def test_prints_total(album, capsys):
    assert main([str(album)]) == 0

    out = capsys.readouterr().out
    assert out.strip() == f"3 total image(s) are reachable from {album.resolve().as_uri()}/"


def test_max_depth_one(album, capsys):
    assert main([str(album), "--max-depth", "1"]) == 0

    assert capsys.readouterr().out.startswith("1 total image(s)")


def test_json_output(album, capsys):
    assert main([str(album), "--json", "--workers", "2"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["total_images"] == 3
    assert payload["max_depth"] == 2
    assert payload["root"].startswith("file://")
    assert payload["stats"]["resources_visited"] == 2


def test_summary_goes_to_stderr(album, capsys):
    assert main([str(album), "--summary"]) == 0

    err = capsys.readouterr().err
    assert "COUNT SUMMARY" in err
    assert "No errors encountered." in err


def test_missing_root_is_counted_as_zero(tmp_path, capsys):
    assert main([str(tmp_path / "does-not-exist"), "--summary"]) == 0

    captured = capsys.readouterr()
    assert captured.out.startswith("0 total image(s)")
    assert "FetchError: 1" in captured.err


@pytest.mark.parametrize("argv", [["x", "--max-depth", "0"], ["x", "--max-depth", "two"], ["x", "--workers", "0"]])
def test_invalid_arguments_exit_2(argv, capsys):
    with pytest.raises(SystemExit) as info:
        main(argv)
    assert info.value.code == 2


def test_invalid_timeout_exits_2(album, capsys):
    with pytest.raises(SystemExit) as info:
        main([str(album), "--timeout", "0"])
    assert info.value.code == 2
    assert "Timeout must be positive" in capsys.readouterr().err
