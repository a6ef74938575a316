import sys

import pytest

from run_tests import RunOptions, TestRunner, parse_args, parse_config_override


def test_parse_config_override():
    assert parse_config_override("retry.max_attempts=5") == {"RETRY__MAX_ATTEMPTS": "5"}
    assert parse_config_override("ui.app_url=http://x/?a=b") == {"UI__APP_URL": "http://x/?a=b"}

    for bad in ("retry.max_attempts", "max_attempts=5", "ui.=1"):
        with pytest.raises(ValueError):
            parse_config_override(bad)


def test_parse_args_defaults():
    options = parse_args([])

    assert options.suite == "all"
    assert options.headless is True
    assert options.allure is True
    assert options.config_overrides == {}


def test_parse_args_collects_overrides():
    options = parse_args(
        ["--suite", "ui", "--browser", "webkit", "--no-headless", "--env", "ci",
         "--set", "ui.explicit_wait=40", "--set", "retry.use_jitter=false"]
    )

    assert options.browser == "webkit"
    assert options.headless is False
    assert options.environment == "ci"
    assert options.config_overrides == {"UI__EXPLICIT_WAIT": "40", "RETRY__USE_JITTER": "false"}


def test_parse_args_rejects_bad_override():
    with pytest.raises(SystemExit):
        parse_args(["--set", "oops"])


def test_build_command(tmp_path):
    runner = TestRunner(RunOptions(suite="unit", tags=["P0", "smoke"], parallel=4), root_dir=tmp_path)

    cmd = runner.build_command()

    assert cmd[:4] == [sys.executable, "-m", "pytest", "uisuites/unit"]
    assert cmd[cmd.index("-m", 3) + 1] == "P0 or smoke"
    assert cmd[cmd.index("-n") + 1] == "4"
    assert str(tmp_path / "reports" / "allure-results") in cmd
    assert cmd[-1] == "-q"


def test_build_command_without_allure(tmp_path):
    cmd = TestRunner(RunOptions(allure=False, verbose=True), root_dir=tmp_path).build_command()

    assert "--alluredir" not in cmd
    assert "-n" not in cmd
    assert cmd[-1] == "-v"


def test_build_env(tmp_path):
    options = RunOptions(
        browser="firefox",
        headless=False,
        environment="ci",
        config_overrides={"RETRY__MAX_ATTEMPTS": "5"},
    )

    env = TestRunner(options, root_dir=tmp_path).build_env(base={"PATH": "/bin"})

    assert env == {
        "PATH": "/bin",
        "UI__BROWSER": "firefox",
        "UI__HEADLESS": "false",
        "ENV": "ci",
        "RETRY__MAX_ATTEMPTS": "5",
    }
