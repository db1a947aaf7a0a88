# tests/test_cli.py
"""
End-to-end tests for the command-line interface (sway_analyzer.main).
"""

import json
import logging

import pytest

from sway_analyzer.main import EXIT_ERROR, EXIT_INFRA, EXIT_OK, main
from tests.conftest import INLINE_ASM_SW, PROTECTED_OWNER_SW, UNPROTECTED_OWNER_SW

BAD_SYNTAX_SW = "contract;\n\nfn main() {\n    let = 5;\n}\n"


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    for name in ("sway_analyzer", "swayparse"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


class TestDetectorsCommand:

    def test_lists_detectors(self, capsys):
        assert main(["detectors"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "inline_assembly_usage" in out
        assert "unprotected_storage_variables" in out
        assert "[High]" in out
        assert "2 detector(s) available." in out


class TestAnalyzeCommand:

    def test_unprotected_write_fails(self, write_source, capsys):
        path = write_source("src/main.sw", UNPROTECTED_OWNER_SW)
        assert main(["analyze", "--files", str(path)]) == EXIT_ERROR
        out = capsys.readouterr().out
        assert f"{path}:" in out
        assert "  14: [High] The `Contract::set_owner` function writes to the `owner` storage variable" in out

    def test_protected_write_passes(self, write_source, capsys):
        path = write_source("src/main.sw", PROTECTED_OWNER_SW)
        assert main(["analyze", "--files", str(path)]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "No findings."

    def test_medium_findings_pass(self, write_source, capsys):
        path = write_source("src/main.sw", INLINE_ASM_SW)
        assert main(["analyze", "--files", str(path)]) == EXIT_OK
        assert "[Medium]" in capsys.readouterr().out

    def test_directory(self, write_source, tmp_path, capsys):
        write_source("src/main.sw", UNPROTECTED_OWNER_SW)
        write_source("out/debug/main.sw", BAD_SYNTAX_SW)
        assert main(["analyze", "--directory", str(tmp_path)]) == EXIT_ERROR

    def test_json_format(self, write_source, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        assert main(["analyze", "--files", str(path), "--format", "json"]) == EXIT_ERROR
        data = json.loads(capsys.readouterr().out)
        assert data["count"] == 1
        (finding,) = data["findings"]
        assert finding["line"] == 14
        assert finding["severity"] == "High"

    def test_detector_selection(self, write_source, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        argv = ["analyze", "--files", str(path), "--detectors", "inline_assembly_usage"]
        assert main(argv) == EXIT_OK

    def test_detector_exclusion(self, write_source, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        argv = ["analyze", "--files", str(path),
                "--exclude", "unprotected_storage_variables,inline_assembly_usage"]
        assert main(argv) == EXIT_OK

    def test_unknown_detector(self, write_source, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        assert main(["analyze", "--files", str(path), "--detectors", "reentrancy"]) == EXIT_INFRA
        assert "unknown detector: 'reentrancy'" in capsys.readouterr().err

    def test_no_inputs(self, capsys):
        assert main(["analyze"]) == EXIT_INFRA

    def test_missing_file(self, tmp_path, capsys):
        assert main(["analyze", "--files", str(tmp_path / "nope.sw")]) == EXIT_INFRA
        assert "cannot read" in capsys.readouterr().err

    def test_parse_error(self, write_source, capsys):
        bad = write_source("bad.sw", BAD_SYNTAX_SW)
        good = write_source("good.sw", PROTECTED_OWNER_SW)
        assert main(["analyze", "--files", str(bad), str(good)]) == EXIT_INFRA
        captured = capsys.readouterr()
        assert f"{bad}:4:9: error:" in captured.err
        assert "No findings." in captured.out

    def test_output_file(self, write_source, tmp_path, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        dest = tmp_path / "reports" / "report.txt"
        assert main(["analyze", "--files", str(path), "-o", str(dest)]) == EXIT_ERROR
        assert capsys.readouterr().out == ""
        assert "[High]" in dest.read_text(encoding="utf-8")

    def test_config_file(self, write_source, tmp_path, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        config = tmp_path / "cfg.json"
        config.write_text(json.dumps({"detectors": ["inline_assembly_usage"]}), encoding="utf-8")
        assert main(["analyze", "--files", str(path), "--config", str(config)]) == EXIT_OK

    def test_command_line_overrides_config(self, write_source, tmp_path, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        config = tmp_path / "cfg.json"
        config.write_text(json.dumps({"display_format": "json"}), encoding="utf-8")
        argv = ["analyze", "--files", str(path), "--config", str(config), "--format", "text"]
        main(argv)
        assert capsys.readouterr().out.startswith(f"{path}:")

    def test_bad_config(self, write_source, tmp_path, capsys):
        path = write_source("main.sw", UNPROTECTED_OWNER_SW)
        config = tmp_path / "cfg.json"
        config.write_text("{not json", encoding="utf-8")
        assert main(["analyze", "--files", str(path), "--config", str(config)]) == EXIT_INFRA
        assert "invalid JSON" in capsys.readouterr().err


class TestParseCommand:

    def test_dump(self, write_source, capsys):
        path = write_source("main.sw", PROTECTED_OWNER_SW)
        assert main(["parse", str(path)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith(f"module {path} (contract)")
        assert "ItemImpl" in out
        assert "@" not in out

    def test_dump_with_spans(self, write_source, capsys):
        path = write_source("main.sw", PROTECTED_OWNER_SW)
        assert main(["parse", str(path), "--spans"]) == EXIT_OK
        assert "ItemImpl @" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["parse", str(tmp_path / "nope.sw")]) == EXIT_INFRA

    def test_bad_syntax(self, write_source, capsys):
        path = write_source("bad.sw", BAD_SYNTAX_SW)
        assert main(["parse", str(path)]) == EXIT_INFRA
        assert f"{path}:4:9: error:" in capsys.readouterr().err


class TestGlobalOptions:

    def test_no_command(self, capsys):
        assert main([]) == EXIT_INFRA
        assert "usage:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "sway-analyzer" in capsys.readouterr().out

    @pytest.mark.parametrize("flags, level", [
        ([], logging.WARNING),
        (["-v"], logging.INFO),
        (["-vv"], logging.DEBUG),
    ])
    def test_verbosity(self, flags, level, capsys):
        main(flags + ["detectors"])
        assert logging.getLogger("sway_analyzer").level == level
        assert logging.getLogger("swayparse").level == level
