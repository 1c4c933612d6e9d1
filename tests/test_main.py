"""Tests for the flags-gen command."""

import json
import os
from pathlib import Path

from typer.testing import CliRunner

from flagsgen import __version__
from flagsgen.generator import GENERATED_HEADER
from flagsgen.main import app, collect_warnings
from flagsgen.models import FieldDescriptor, StructDescriptor

runner = CliRunner()

TESTDATA = Path(__file__).parent / "testdata"

SOURCE = """\
package config

import "time"

// +flags-gen
// ServerConfig defines server configuration
type ServerConfig struct {
	// Host is the server hostname
	Host string `json:"host" default:"localhost"`
	// Port is the server port
	Port int `json:"port" default:"8080"`
	// Timeout for requests
	Timeout time.Duration `json:"timeout" default:"30s"`
}
"""


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Successful runs
# ---------------------------------------------------------------------------


class TestGenerateFile:
    def test_default_output_path(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 0, result.output
        out = tmp_path / "types_flags.go"
        assert out.exists()
        text = out.read_text(encoding="utf-8")
        assert text.startswith(GENERATED_HEADER + "\n\npackage config\n")
        assert '\tfs.StringVar(&s.Host, "host", "localhost", "Host is the server hostname")\n' in text
        assert '\tfs.DurationVar(&s.Timeout, "timeout", 30*time.Second, "Timeout for requests")\n' in text
        assert "Generated flags code for 1 struct(s)" in result.output

    def test_explicit_output(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        out = tmp_path / "gen" / "flags.go"
        out.parent.mkdir()
        result = runner.invoke(app, ["--input", str(src), "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert not (tmp_path / "types_flags.go").exists()

    def test_stdout(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src), "--stdout"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith(GENERATED_HEADER)
        assert "func (s *ServerConfig) AddFlags(fs *pflag.FlagSet) {" in result.output
        assert not (tmp_path / "types_flags.go").exists()

    def test_rerun_is_identical(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        runner.invoke(app, ["-i", str(src)])
        out = tmp_path / "types_flags.go"
        first = out.read_text(encoding="utf-8")
        os.utime(out, (1_000_000, 1_000_000))
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 0, result.output
        assert f"{out} is up to date" in result.output
        assert out.read_text(encoding="utf-8") == first
        assert out.stat().st_mtime == 1_000_000

    def test_stale_output_regenerated(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        out = _write(tmp_path / "types_flags.go", "package config\n")
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 0, result.output
        assert "Generated flags code for 1 struct(s)" in result.output
        assert out.read_text(encoding="utf-8").startswith(GENERATED_HEADER)

    def test_fixture_file(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "example.go", (TESTDATA / "example.go").read_text(encoding="utf-8"))
        result = runner.invoke(app, ["-i", str(src), "--stdout"])
        assert result.exit_code == 0, result.output
        assert "package testdata\n" in result.output
        assert result.output.count("\tfs.") == 13
        assert '\t"time"\n' in result.output

    def test_config_file_applies(self, tmp_path: Path) -> None:
        _write(
            tmp_path / "flags-gen.toml",
            '[generate]\nmethod_name = "RegisterFlags"\n\n[output]\nsuffix = "_gen.go"\n',
        )
        src = _write(tmp_path / "pkg" / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 0, result.output
        text = (tmp_path / "pkg" / "types_gen.go").read_text(encoding="utf-8")
        assert "func (s *ServerConfig) RegisterFlags(fs *pflag.FlagSet) {" in text

    def test_explicit_config(self, tmp_path: Path) -> None:
        cfg = _write(tmp_path / "custom.toml", '[generate]\nmethod_name = "Bind"\n')
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src), "--config", str(cfg), "--stdout"])
        assert result.exit_code == 0, result.output
        assert ") Bind(fs *pflag.FlagSet) {" in result.output


class TestJsonOutput:
    def test_summary(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["input"] == str(src)
        assert data["output"] == str(tmp_path / "types_flags.go")
        assert data["warnings"] == []
        assert "code" not in data
        assert data["changed"] is True
        struct = data["structs"][0]
        assert struct["name"] == "ServerConfig"
        assert struct["imports"] == ["time"]
        assert [f["flag_name"] for f in struct["fields"]] == ["host", "port", "timeout"]
        assert struct["fields"][1]["default_value"] == 8080

    def test_with_stdout(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src), "--json", "--stdout"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["output"] is None
        assert data["changed"] is False
        assert data["code"].startswith(GENERATED_HEADER)
        assert not (tmp_path / "types_flags.go").exists()

    def test_warnings_reported(self, tmp_path: Path) -> None:
        src = _write(
            tmp_path / "types.go",
            "package config\n\n// +flags-gen\ntype C struct {\n\tPort int `default:\"abc\"`\n}\n",
        )
        result = runner.invoke(app, ["-i", str(src), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert len(data["warnings"]) == 1
        assert data["warnings"][0].startswith("types.go:5: C.Port: ")

    def test_error(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-i", str(tmp_path / "missing.go"), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert "does not exist" in data["error"]
        assert data["type"] == "InputError"

    def test_parse_error_type(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", "package config\n\ntype Broken struct {\n")
        result = runner.invoke(app, ["-i", str(src), "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["type"] == "ParseError"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestErrors:
    def test_input_required(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 1
        assert "input file is required (--input/-i)" in result.output

    def test_missing_input(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-i", str(tmp_path / "missing.go")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_not_a_go_file(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.txt", SOURCE)
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert ".go extension" in result.output

    def test_traversal(self) -> None:
        result = runner.invoke(app, ["-i", "../types.go"])
        assert result.exit_code == 1
        assert "directory traversal" in result.output

    def test_output_equals_input(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src), "-o", str(src)])
        assert result.exit_code == 1
        assert "output file must differ from the input file" in result.output
        assert src.read_text(encoding="utf-8") == SOURCE

    def test_no_annotated_structs(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", "package config\n\ntype Plain struct {\n\tA string\n}\n")
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert "no structs with +flags-gen annotation found" in result.output
        assert not (tmp_path / "types_flags.go").exists()

    def test_syntax_error(self, tmp_path: Path) -> None:
        src = _write(tmp_path / "types.go", "package config\n\ntype Broken struct {\n")
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert "failed to parse input file: syntax error" in result.output

    def test_unsupported_type(self, tmp_path: Path) -> None:
        src = _write(
            tmp_path / "types.go",
            "package config\n\n// +flags-gen\ntype C struct {\n\tM map[string]string\n}\n",
        )
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert "failed to parse input file" in result.output
        assert "unsupported type" in result.output
        assert not (tmp_path / "types_flags.go").exists()

    def test_bad_config(self, tmp_path: Path) -> None:
        _write(tmp_path / "flags-gen.toml", "[output]\nsuffix = 3\n")
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert "'suffix' must be of type str" in result.output

    def test_file_too_large(self, tmp_path: Path) -> None:
        _write(tmp_path / "flags-gen.toml", "[input]\nmax_bytes = 16\n")
        src = _write(tmp_path / "types.go", SOURCE)
        result = runner.invoke(app, ["-i", str(src)])
        assert result.exit_code == 1
        assert "too large" in result.output


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"flags-gen version {__version__}" in result.output


# ---------------------------------------------------------------------------
# collect_warnings()
# ---------------------------------------------------------------------------


class TestCollectWarnings:
    def test_unsupported_field(self) -> None:
        s = StructDescriptor(
            name="C",
            namespace="p",
            fields=[FieldDescriptor(name="When", type="time.Time", line=7)],
        )
        assert collect_warnings([s], "types.go") == [
            "types.go:7: C.When: type time.Time has no flag binding; field skipped"
        ]

    def test_malformed_default(self) -> None:
        s = StructDescriptor(
            name="C",
            namespace="p",
            fields=[
                FieldDescriptor(
                    name="Port",
                    type="int",
                    registration_method="IntVar",
                    default_value="abc",
                    default_value_literal="0",
                    default_error="invalid int default 'abc'",
                    line=3,
                )
            ],
        )
        assert collect_warnings([s], "types.go") == [
            "types.go:3: C.Port: invalid int default 'abc'; using 0 instead"
        ]

    def test_clean(self) -> None:
        s = StructDescriptor(
            name="C",
            namespace="p",
            fields=[FieldDescriptor(name="A", type="string", registration_method="StringVar")],
        )
        assert collect_warnings([s], "types.go") == []
