from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from diode_service import main as main_module
from diode_service.adapters.discovery import JsonLinesDiscoverySource
from diode_service.config import ServiceConfig
from diode_service.domain.errors import ServiceStartError

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "load_dotenv", lambda: False)
    monkeypatch.setenv("DIODE_SERVICE_NETBOX_ENDPOINT", "http://netbox.test/api/")
    for name in ("NETBOX_TOKEN", "LOG_LEVEL", "MAX_CONCURRENCY", "BATCH_SIZE"):
        monkeypatch.delenv(f"DIODE_SERVICE_{name}", raising=False)


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    async def fake_run(config: ServiceConfig, **kwargs: object) -> None:
        captured["config"] = config
        captured.update(kwargs)

    monkeypatch.setattr(main_module, "run_reconciler", fake_run)
    return captured


def test_main_cli_defaults(captured: dict[str, object]) -> None:
    main_module.main([])

    config = captured["config"]
    source = captured["source"]
    assert isinstance(config, ServiceConfig)
    assert config.batch_size == 100
    assert config.max_concurrency == 8
    assert isinstance(source, JsonLinesDiscoverySource)
    assert source.path is None
    assert captured["stop_event"] is not None


def test_main_cli_with_flags(captured: dict[str, object], tmp_path: Path) -> None:
    facts = tmp_path / "facts.jsonl"
    facts.write_text("")

    main_module.main(
        [
            "--facts",
            str(facts),
            "--batch-size",
            "25",
            "--max-concurrency",
            "4",
            "--log-level",
            "debug",
        ]
    )

    config = captured["config"]
    source = captured["source"]
    assert isinstance(config, ServiceConfig)
    assert config.batch_size == 25
    assert config.max_concurrency == 4
    assert config.log_level == "debug"
    assert isinstance(source, JsonLinesDiscoverySource)
    assert source.path == facts
    assert source.batch_size == 25


@pytest.mark.usefixtures("captured")
def test_main_cli_missing_endpoint_exits_2(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DIODE_SERVICE_NETBOX_ENDPOINT")

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 2


@pytest.mark.usefixtures("captured")
@pytest.mark.parametrize(
    "argv",
    [
        ["--batch-size", "0"],
        ["--max-concurrency", "-1"],
        ["--facts", "/nonexistent/facts.jsonl"],
        ["--batch-size", "many"],
    ],
)
def test_main_cli_invalid_arguments_exit_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2


def test_main_cli_start_failure_exits_1(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    async def failing_run(*_: object, **__: object) -> None:
        raise ServiceStartError("Inventory endpoint is not usable: HTTP 503")

    monkeypatch.setattr(main_module, "run_reconciler", failing_run)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 1
    assert "not usable" in capsys.readouterr().err
