import logging

from cargo_remote.utils.logging import console_level


def test_console_level_follows_flags():
    """Verify the CLI flags select WARNING, INFO or DEBUG."""
    assert console_level(env={}) == logging.WARNING
    assert console_level(verbose=True, env={}) == logging.INFO
    assert console_level(verbose=True, debug=True, env={}) == logging.DEBUG


def test_console_level_env_override():
    """Verify CARGO_REMOTE_LOG wins and unknown names are ignored."""
    assert console_level(env={"CARGO_REMOTE_LOG": "debug"}) == logging.DEBUG
    assert console_level(debug=True, env={"CARGO_REMOTE_LOG": "error"}) == logging.ERROR
    assert console_level(verbose=True, env={"CARGO_REMOTE_LOG": "chatty"}) == logging.INFO
