# tests/core/test_logging_setup.py
import pathlib

import pytest

from impostor import main


@pytest.mark.parametrize("contents", [None, "{not json", '{"version": 99}'])
def test_unusable_logging_config_falls_back_to_stdout(tmp_path: pathlib.Path, capsys, contents):
    config_file = tmp_path / "logging_config.json"
    if contents is not None:
        config_file.write_text(contents)
    kept = main._queue_handler_instance

    assert main.configure_logging_from_file(config_file) is None

    assert "Using basic stdout logging" in capsys.readouterr().out
    assert main._queue_handler_instance is kept
