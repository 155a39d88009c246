from pathlib import Path

import pytest

from geocoin.cli.play import main
from geocoin.cli.pygame_viewer import DEFAULT_SAVE_DIR
from geocoin.content.io import SAVE_SLOT


def test_play_launcher_defaults_to_canonical_save_dir(monkeypatch) -> None:
    captured = {}

    def fake_run(**kwargs):
        captured.update(kwargs)
        return 0

    monkeypatch.setattr("geocoin.cli.play.run_pygame_viewer", fake_run)

    result = main(["--headless"])

    assert result == 0
    assert captured["save_dir"] == DEFAULT_SAVE_DIR
    assert captured["seed"] == 7
    assert captured["geo_fixes"] == []
    assert captured["headless"] is True


def test_play_launcher_forwards_seed_and_geo_fixes(monkeypatch, tmp_path: Path) -> None:
    captured = {}

    def fake_run(**kwargs):
        captured.update(kwargs)
        return 0

    monkeypatch.setattr("geocoin.cli.play.run_pygame_viewer", fake_run)
    monkeypatch.setenv("GEOCOIN_HEADLESS", "1")

    main(["--seed", "11", "--save-dir", str(tmp_path), "--geo-fix", "36.99,-122.06", "--geo-fix", "1,2"])

    assert captured["seed"] == 11
    assert captured["save_dir"] == str(tmp_path)
    assert captured["geo_fixes"] == [(36.99, -122.06), (1.0, 2.0)]
    assert captured["headless"] is True


def test_play_launcher_rejects_malformed_geo_fix(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as result:
        main(["--geo-fix", "north"])

    assert result.value.code == 2
    assert "geo fix must be LAT,LNG" in capsys.readouterr().err


def test_play_launcher_console_mode_plays_in_terminal(monkeypatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    commands = iter(["right", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

    result = main(["--console", "--save-dir", str(tmp_path), "--seed", "3"])

    output = capsys.readouterr().out
    assert result == 0
    assert "status=fresh" in output
    assert "move: applied" in output
    assert f"saved slot={SAVE_SLOT}" in output
    assert (tmp_path / f"{SAVE_SLOT}.json").exists()
