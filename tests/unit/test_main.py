import pytest
from dotenv import dotenv_values

import main


class FakeServer:
    def __init__(self):
        self.ran = False

    def run(self):
        self.ran = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ALFA_API_KEY",
        "ALFA_CRAWLER_API_BASE_URL",
        "DEFAULT_MINIMUM_TOKENS",
        "ALFA_REQUEST_TIMEOUT",
    ):
        # setenv first so values load_dotenv() adds are undone after the test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_set_key_only_saves_and_exits_zero(tmp_path, monkeypatch) -> None:
    env_path = tmp_path / ".env"
    monkeypatch.setattr(main, "create_server", pytest.fail)

    assert main.main(["--setKey", "abc123", "--env-file", str(env_path)]) == 0
    assert dotenv_values(env_path)["ALFA_API_KEY"] == "abc123"


def test_set_key_only_save_failure_exits_one(tmp_path) -> None:
    env_path = tmp_path / "missing-dir" / ".env"

    assert main.main(["--setKey", "abc123", "--env-file", str(env_path)]) == 1


def test_key_save_failure_still_starts_server_with_key(tmp_path, monkeypatch) -> None:
    env_path = tmp_path / "missing-dir" / ".env"
    captured = {}
    server = FakeServer()

    def fake_create_server(config):
        captured["config"] = config
        return server

    monkeypatch.setattr(main, "create_server", fake_create_server)

    assert main.main(["--key", "abc123", "--env-file", str(env_path)]) == 0
    assert server.ran
    assert captured["config"].api_key == "abc123"


def test_server_config_comes_from_env_file(tmp_path, monkeypatch) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "ALFA_CRAWLER_API_BASE_URL=https://crawler.test/api\nDEFAULT_MINIMUM_TOKENS=7000\n",
        encoding="utf-8",
    )
    captured = {}

    def fake_create_server(config):
        captured["config"] = config
        return FakeServer()

    monkeypatch.setattr(main, "create_server", fake_create_server)

    assert main.main(["--env-file", str(env_path)]) == 0
    assert captured["config"].base_url == "https://crawler.test/api"
    assert captured["config"].minimum_tokens == 7000
    assert captured["config"].api_key is None


def test_uncaught_startup_fault_exits_one(tmp_path, monkeypatch) -> None:
    def broken_create_server(config):
        raise RuntimeError("cannot bind transport")

    monkeypatch.setattr(main, "create_server", broken_create_server)

    assert main.main(["--env-file", str(tmp_path / ".env")]) == 1


def test_key_and_set_key_are_mutually_exclusive() -> None:
    with pytest.raises(SystemExit):
        main.parse_args(["--key", "a", "--setKey", "b"])
