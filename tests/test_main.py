from unittest.mock import patch

import main
from devdash.tui import BackendInitError


def test_parse_args_defaults():
    args = main.parse_args([])
    assert args.config == ".devdash.yml"
    assert args.debug is False
    assert args.term is False


def test_parse_args_flags():
    args = main.parse_args(["-config", "other.yml", "-debug", "-term"])
    assert args.config == "other.yml"
    assert args.debug is True
    assert args.term is True


def test_missing_config_shows_welcome(tui, manager, tmp_path):
    assert main.run(tui, str(tmp_path / "missing.yml")) == 0
    (kwargs,) = manager.draws("text_box")
    assert kwargs["title"] == " Welcome to devdash "
    assert manager.quit_key == "C-c"
    assert manager.names()[-1] == "loop"


def test_invalid_config_shows_error(tui, manager, tmp_path):
    path = tmp_path / ".devdash.yml"
    path.write_text("general:\n  refresh: -1\n", encoding="utf-8")

    assert main.run(tui, str(path)) == 1
    (kwargs,) = manager.draws("text_box")
    assert kwargs["title"] == " Error "
    assert "refresh" in kwargs["data"]
    assert manager.names()[-1] == "loop"


def test_backend_init_failure(capsys, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch.object(main, "RichManager", side_effect=BackendInitError("no terminal")):
        assert main.main([]) == 1
    assert "no terminal" in capsys.readouterr().err


def test_term_prints_size(capsys):
    assert main.main(["-term"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Width: ")
    assert ", Height: " in out
