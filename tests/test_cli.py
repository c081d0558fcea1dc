# SPDX-License-Identifier: MIT
"""Tests for mkgen CLI."""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

import mkgen
from mkgen.cli import main, parse_variables, setup_logging

PROJECT_TOML = """\
[project]
name = "hello"

[[package]]
name = "hello"
language = "c"
files = ["hello.c", "hello.rc"]

[[package.config]]
name = "Debug"
objdir = "obj/Debug"

[[package.config]]
name = "Release"
objdir = "obj/Release"
flags = ["optimize"]
"""


@pytest.fixture
def project_file(tmp_path: Path) -> Path:
    path = tmp_path / "mkgen.toml"
    path.write_text(PROJECT_TOML)
    return path


@pytest.fixture(autouse=True)
def clear_cli_vars():
    yield
    mkgen.set_cli_vars({})


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_normal(self) -> None:
        """Test normal logging setup."""
        # Just ensure it doesn't crash
        setup_logging(verbose=False, debug=False)

    def test_setup_logging_verbose(self) -> None:
        setup_logging(verbose=True, debug=False)

    def test_setup_logging_debug(self) -> None:
        setup_logging(verbose=False, debug=True)


class TestParseVariables:
    """Tests for parse_variables function."""

    def test_variables_and_remaining(self) -> None:
        variables, remaining = parse_variables(
            ["MKGEN_OS=windows", "stray", "--flag=x", "=bad", "EMPTY="]
        )
        assert variables == {"MKGEN_OS": "windows", "EMPTY": ""}
        assert remaining == ["stray", "--flag=x", "=bad"]

    def test_value_with_equals(self) -> None:
        variables, _ = parse_variables(["DEFS=A=1"])
        assert variables == {"DEFS": "A=1"}


class TestGetVar:
    """Tests for mkgen.get_var."""

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MKGEN_TEST_VAR", "env")
        assert mkgen.get_var("MKGEN_TEST_VAR") == "env"

    def test_command_line_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MKGEN_TEST_VAR", "env")
        mkgen.set_cli_vars({"MKGEN_TEST_VAR": "cli"})
        assert mkgen.get_var("MKGEN_TEST_VAR") == "cli"

    def test_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MKGEN_TEST_VAR", raising=False)
        assert mkgen.get_var("MKGEN_TEST_VAR", "dflt") == "dflt"


class TestGenerateCommand:
    """Tests for 'mkgen generate'."""

    def test_generate(
        self, project_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test generating next to the project file."""
        result = main(["generate", "-f", str(project_file), "--os", "linux"])
        assert result == 0
        makefile = project_file.parent / "Makefile"
        assert makefile.exists()
        assert str(makefile) in capsys.readouterr().out

        text = makefile.read_text()
        assert text.startswith("# C Console Executable Makefile")
        assert "ifeq ($(CONFIG),Release)" in text
        assert "RESOURCES := " not in text

    def test_output_dir(self, project_file: Path, tmp_path: Path) -> None:
        """Test -o puts the makefiles elsewhere."""
        out = tmp_path / "out"
        result = main(
            ["generate", "-f", str(project_file), "-o", str(out), "--os", "linux"]
        )
        assert result == 0
        assert (out / "Makefile").exists()

    def test_os_variable(self, project_file: Path) -> None:
        """Test MKGEN_OS=windows given on the command line."""
        result = main(["generate", "-f", str(project_file), "MKGEN_OS=windows"])
        assert result == 0
        text = (project_file.parent / "Makefile").read_text()
        assert "\t$(OBJDIR)/hello.res \\\n" in text

    def test_os_environment(
        self, project_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test MKGEN_OS and MKGEN_VERBOSE from the environment."""
        monkeypatch.setenv("MKGEN_OS", "windows")
        monkeypatch.setenv("MKGEN_VERBOSE", "yes")
        assert main(["generate", "-f", str(project_file)]) == 0
        text = (project_file.parent / "Makefile").read_text()
        assert "RESOURCES :=" in text
        assert "Linking" not in text

    def test_option_beats_variable(self, project_file: Path) -> None:
        result = main(
            ["generate", "-f", str(project_file), "--os", "linux", "MKGEN_OS=windows"]
        )
        assert result == 0
        assert "RESOURCES := " not in (project_file.parent / "Makefile").read_text()

    def test_toolchain(self, project_file: Path) -> None:
        result = main(
            ["generate", "-f", str(project_file), "--os", "windows", "--cc", "dmc"]
        )
        assert result == 0
        assert "dmc $(CFLAGS)" in (project_file.parent / "Makefile").read_text()

    def test_unknown_toolchain(self, project_file: Path) -> None:
        result = main(["generate", "-f", str(project_file), "--cc", "watcom"])
        assert result == 1
        assert not (project_file.parent / "Makefile").exists()

    def test_unexpected_argument(self, project_file: Path) -> None:
        result = main(["generate", "-f", str(project_file), "stray"])
        assert result == 1

    def test_missing_project_file(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a missing project file is reported, not raised."""
        result = main(["generate", "-f", str(tmp_path / "none.toml")])
        assert result == 1
        assert "cannot read project file" in caplog.text


class TestInfoCommand:
    """Tests for 'mkgen info'."""

    def test_info(
        self, project_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["info", "-f", str(project_file)]) == 0
        out = capsys.readouterr().out
        assert "Project: hello" in out
        assert "hello (c Console Executable)" in out
        assert "makefile: Makefile" in out
        assert "configurations: Debug, Release" in out

    def test_info_bad_file(self, tmp_path: Path) -> None:
        path = tmp_path / "mkgen.toml"
        path.write_text("[[package]]\nname = 'a'\nbogus = 1\n")
        assert main(["info", "-f", str(path)]) == 1


class TestCLICommands:
    """Tests for running the CLI as a program."""

    def test_mkgen_help(self) -> None:
        """Test mkgen --help."""
        result = subprocess.run(
            [sys.executable, "-m", "mkgen.cli", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "mkgen" in result.stdout
        assert "generate" in result.stdout
        assert "info" in result.stdout

    def test_mkgen_version(self) -> None:
        """Test mkgen --version."""
        result = subprocess.run(
            [sys.executable, "-m", "mkgen.cli", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "0.1.0" in result.stdout

    def test_no_command(self) -> None:
        """Test that mkgen without a command prints help and fails."""
        result = subprocess.run(
            [sys.executable, "-m", "mkgen.cli"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 1
        assert "usage" in result.stdout


class TestIntegration:
    """Integration tests running make on a generated makefile."""

    @pytest.mark.skipif(
        not sys.platform.startswith("linux"), reason="GNU toolchain test"
    )
    def test_full_build_cycle(self, tmp_path: Path) -> None:
        """Test generate, make, run and make clean with a simple C program."""
        if shutil.which("make") is None:
            pytest.skip("make not found")
        if shutil.which("cc") is None:
            pytest.skip("cc not found")

        (tmp_path / "hello.c").write_text(
            """\
#include <stdio.h>

int main(void) {
    printf("Hello, mkgen!\\n");
    return 0;
}
"""
        )
        project_file = tmp_path / "mkgen.toml"
        project_file.write_text(PROJECT_TOML)

        assert main(["generate", "-f", str(project_file), "--os", "linux"]) == 0

        result = subprocess.run(
            ["make", "CONFIG=Release"], capture_output=True, text=True, cwd=tmp_path
        )
        assert result.returncode == 0, f"make failed: {result.stderr}"
        assert (tmp_path / "obj" / "Release" / "hello.o").exists()
        assert (tmp_path / "obj" / "Release" / "hello.d").exists()

        result = subprocess.run(
            [str(tmp_path / "hello")], capture_output=True, text=True
        )
        assert result.returncode == 0
        assert "Hello, mkgen!" in result.stdout

        result = subprocess.run(
            ["make", "CONFIG=Release", "clean"],
            capture_output=True,
            text=True,
            cwd=tmp_path,
        )
        assert result.returncode == 0
        assert not (tmp_path / "hello").exists()
