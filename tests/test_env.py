from cargo_remote.utils import build_command, forwarded_env, quote_remote_path


def test_forwarded_env_only_includes_set_variables():
    """Verify whitelisted variables are forwarded quoted and unset ones skipped."""
    env = {"RUST_LOG": "debug,hyper=info x", "RUST_BACKTRACE": "1", "HOME": "/root"}

    assert forwarded_env(["RUST_BACKTRACE", "RUST_LOG", "CARGO_INCREMENTAL"], env) == [
        "RUST_BACKTRACE=1",
        "RUST_LOG='debug,hyper=info x'",
    ]


def test_build_command_shape():
    """Verify the remote command enters the project, loads direnv and runs cargo."""
    cmd = build_command(
        "~/remote-builds/app",
        ["build", "--release"],
        build_env=["RUST_BACKTRACE=1"],
    )
    assert cmd == (
        "cd ~/remote-builds/app; eval $(direnv export bash); "
        "RUST_BACKTRACE=1 cargo build --release"
    )


def test_build_command_config_overrides_are_quoted():
    """Verify patch remaps are passed as quoted --config flags before the subcommand."""
    cmd = build_command(
        "/srv/builds/app",
        ["test", "--", "--nocapture"],
        config_overrides=['patch.crates-io.foo.path="../.patches/0123/foo"'],
    )
    assert cmd.endswith(
        "cargo --config 'patch.crates-io.foo.path=\"../.patches/0123/foo\"' test -- --nocapture"
    )


def test_quote_remote_path_keeps_home_expandable():
    """Verify ~/ prefixes stay outside quotes and odd paths are quoted."""
    assert quote_remote_path("~") == "~"
    assert quote_remote_path("~/remote builds") == "~/'remote builds'"
    assert quote_remote_path("/srv/a b") == "'/srv/a b'"
