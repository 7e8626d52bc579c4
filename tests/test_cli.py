"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest

from helpers import FakeLookupClient, make_result
from reference_tool.cli import EXIT_FAILURE, build_parser, main
from reference_tool.core.service import ReferenceService
from reference_tool.output import OutputFormat

ROOT = "hep-th/9711200"


@pytest.fixture
def fake_service(monkeypatch: pytest.MonkeyPatch) -> ReferenceService:
    """Route CLI calls through a scripted client."""
    service = ReferenceService(request_delay_ms=0)
    service.client = FakeLookupClient(
        {
            ROOT: make_result(ROOT, ["hep-th/9802109", "hep-th/9802150"]),
            "hep-th/9802109": make_result("hep-th/9802109", []),
            "hep-th/9802150": make_result("hep-th/9802150", []),
        }
    )
    monkeypatch.setattr(ReferenceService, "from_settings", classmethod(lambda cls, s: service))
    return service


class TestParser:
    """Tests for argument parsing."""

    def test_global_options(self):
        args = build_parser().parse_args(
            ["--arxiv-id", ROOT, "--format", "bibtex", "--categories", "hep-th,gr-qc"]
        )
        assert args.global_arxiv_id == ROOT
        assert args.format is OutputFormat.BIBTEX
        assert args.categories == "hep-th,gr-qc"
        assert args.command is None

    def test_network_subcommand(self):
        args = build_parser().parse_args(["network", ROOT, "--depth", "2", "--max-nodes", "50"])
        assert args.command == "network"
        assert args.arxiv_id == ROOT
        assert args.depth == 2
        assert args.max_nodes == 50

    def test_global_options_after_subcommand(self):
        args = build_parser().parse_args(
            [
                "network", ROOT, "--depth", "2", "--max-nodes", "200",
                "--output", "network.json", "--format", "bibtex", "-v",
            ]
        )
        assert args.output == Path("network.json")
        assert args.format is OutputFormat.BIBTEX
        assert args.verbose is True
        assert args.max_nodes == 200

    def test_options_before_subcommand_survive(self):
        args = build_parser().parse_args(
            ["--output", "before.json", "--categories", "hep-th", "network", ROOT]
        )
        assert args.output == Path("before.json")
        assert args.categories == "hep-th"
        assert args.format is None
        assert args.verbose is False

    def test_config_option_after_config_command(self):
        args = build_parser().parse_args(["config", "--config", "custom.toml"])
        assert args.config == Path("custom.toml")

    def test_invalid_format(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--format", "xml"])


class TestCommands:
    """Tests for running commands end to end."""

    def test_config_command(self, clean_env, temp_config: Path, capsys: pytest.CaptureFixture):
        assert main(["--config", str(temp_config), "config"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Current configuration:")
        assert "request_delay_ms = 100" in out

    def test_init_config(self, clean_env, temp_config: Path):
        assert main(["--config", str(temp_config), "init-config"]) == 0
        assert "[api]" in temp_config.read_text(encoding="utf-8")

    def test_references_to_file(
        self,
        clean_env,
        temp_config: Path,
        tmp_path: Path,
        fake_service: ReferenceService,
    ):
        out = tmp_path / "refs.json"
        code = main(["--config", str(temp_config), "--arxiv-id", ROOT, "--output", str(out)])

        assert code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert [r["arxiv_id"] for r in data] == ["hep-th/9802109", "hep-th/9802150"]

    def test_network_to_file(
        self,
        clean_env,
        temp_config: Path,
        tmp_path: Path,
        fake_service: ReferenceService,
    ):
        out = tmp_path / "network.json"
        code = main(["--config", str(temp_config), "--output", str(out), "network", ROOT])

        assert code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["root"] == ROOT
        assert len(data["nodes"]) == 3
        assert len(data["edges"]) == 2

    def test_network_options_after_subcommand(
        self,
        clean_env,
        temp_config: Path,
        tmp_path: Path,
        fake_service: ReferenceService,
    ):
        out = tmp_path / "network.bib"
        code = main(
            [
                "network", ROOT, "--depth", "1", "--max-nodes", "200",
                "--config", str(temp_config), "--format", "bibtex", "--output", str(out),
            ]
        )

        assert code == 0
        assert out.read_text(encoding="utf-8").count("@article{") == 3

    def test_missing_arxiv_id(self, clean_env, temp_config: Path, fake_service: ReferenceService):
        assert main(["--config", str(temp_config), "network"]) == EXIT_FAILURE

    def test_unreachable_root(
        self,
        clean_env,
        temp_config: Path,
        tmp_path: Path,
        fake_service: ReferenceService,
    ):
        out = tmp_path / "network.json"
        code = main(
            ["--config", str(temp_config), "--output", str(out), "network", "2301.99999"]
        )

        assert code == EXIT_FAILURE
        assert not out.exists()
