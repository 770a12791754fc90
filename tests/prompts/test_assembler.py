"""Tests for PromptAssembler."""

from pathlib import Path

import pytest

from prompt_assembler.config import MergedConfig
from prompt_assembler.errors import (
    MissingArgumentError,
    MissingFragmentFileError,
    RenderError,
    UnknownPromptError,
    WrongPromptKindError,
)
from prompt_assembler.prompts import PromptAssembler, RenderRequest

pytestmark = pytest.mark.unit


@pytest.fixture
def assembler(library: Path, write_file) -> PromptAssembler:
    """Assembler over a small library with sequence and template prompts."""
    write_file(
        library,
        "config.toml",
        "[prompt.ticket]\n"
        'description = "Ticket triage"\n'
        'tags = ["work"]\n'
        'prompts = ["ticket.md", "details.md"]\n'
        "\n"
        "[prompt.echo]\n"
        'prompts = ["echo.md"]\n'
        "\n"
        "[prompt.troubleshoot]\n"
        'template = "troubleshooting.j2"\n',
    )
    write_file(library, "ticket.md", "Ticket {0}\n")
    write_file(library, "details.md", "Details {{ {1} }}\n")
    write_file(library, "echo.md", "Echo {0}")
    write_file(library, "troubleshooting.j2", "Hello {{ var }}!\n{% include 'sig.j2' %}")
    write_file(library, "sig.j2", "Signed, {{ name }}\n")
    return PromptAssembler.from_directory(library)


class TestRenderPrompt:
    """Tests for render_prompt()."""

    def test_sequence(self, assembler: PromptAssembler) -> None:
        rendered = assembler.render_prompt("ticket", ["ABC-123", "Check logs"])

        assert rendered == "Ticket ABC-123\nDetails { Check logs }\n"

    def test_stdin_as_first_argument(self, assembler: PromptAssembler) -> None:
        """Test piped text passed as argument 0 fills {0}."""
        assert assembler.render_prompt("echo", ["piped text"]) == "Echo piped text"

    def test_template(self, assembler: PromptAssembler, tmp_path: Path, write_file) -> None:
        data = write_file(tmp_path, "vars.json", '{"var": "World", "name": "Bede"}')

        rendered = assembler.render_prompt("troubleshoot", data_path=data)

        assert rendered == "Hello World!\nSigned, Bede\n"

    def test_unknown_prompt(self, assembler: PromptAssembler) -> None:
        with pytest.raises(UnknownPromptError, match="unknown prompt: nope"):
            assembler.render_prompt("nope")

    def test_missing_argument(self, assembler: PromptAssembler) -> None:
        with pytest.raises(MissingArgumentError):
            assembler.render_prompt("ticket", ["ABC-123"])

    def test_data_for_sequence_rejected(self, assembler: PromptAssembler, tmp_path: Path) -> None:
        with pytest.raises(WrongPromptKindError):
            assembler.render_prompt("ticket", data_path=tmp_path / "vars.json")

    def test_template_without_data_rejected(self, assembler: PromptAssembler) -> None:
        with pytest.raises(WrongPromptKindError):
            assembler.render_prompt("troubleshoot")

    def test_missing_fragment(self, library: Path, write_file) -> None:
        write_file(library, "config.toml", '[prompt.gone]\nprompts = ["absent.md"]\n')
        assembler = PromptAssembler.from_directory(library)

        with pytest.raises(MissingFragmentFileError) as exc_info:
            assembler.render_prompt("gone")

        assert exc_info.value.name == "absent.md"
        assert exc_info.value.path == library / "absent.md"

    def test_prompt_path_override(self, library: Path, tmp_path: Path, write_file) -> None:
        """Test a per-prompt prompt_path beats the library-wide one."""
        write_file(
            library,
            "config.toml",
            f'prompt_path = "{(tmp_path / "shared").as_posix()}"\n'
            "[prompt.own]\n"
            f'prompt_path = "{(tmp_path / "own").as_posix()}"\n'
            'prompts = ["p.md"]\n'
            "[prompt.lib]\n"
            'prompts = ["p.md"]\n',
        )
        write_file(tmp_path, "own/p.md", "own")
        write_file(tmp_path, "shared/p.md", "shared")
        write_file(library, "p.md", "library")
        assembler = PromptAssembler.from_directory(library)

        assert assembler.render_prompt("own") == "own"
        assert assembler.render_prompt("lib") == "shared"

    def test_conf_d_prompt_reads_from_its_own_directory(self, library: Path, write_file) -> None:
        """Test fragments default to the directory of the defining file."""
        write_file(library, "config.toml", "")
        write_file(library, "conf.d/extra.toml", '[prompt.extra]\nprompts = ["extra.md"]\n')
        write_file(library, "conf.d/extra.md", "from conf.d")
        write_file(library, "extra.md", "from root")

        assert PromptAssembler.from_directory(library).render_prompt("extra") == "from conf.d"

    def test_fragment_newlines_preserved(self, library: Path, write_file) -> None:
        write_file(library, "config.toml", '[prompt.crlf]\nprompts = ["crlf.md"]\n')
        write_file(library, "crlf.md", "line one\r\nline two\r\n")

        rendered = PromptAssembler.from_directory(library).render_prompt("crlf")

        assert rendered == "line one\r\nline two\r\n"


class TestRender:
    """Tests for render() with RenderRequest."""

    def test_prompt_mode(self, assembler: PromptAssembler) -> None:
        request = RenderRequest(prompt="ticket", args=("A", "B"))

        assert assembler.render(request) == "Ticket A\nDetails { B }\n"

    def test_raw_mode(self, assembler: PromptAssembler, library: Path) -> None:
        request = RenderRequest(parts=("ticket.md", "details.md"), raw=True)

        assert assembler.render(request, working_dir=library) == "Ticket {0}\nDetails {{ {1} }}\n"

    def test_prompt_required(self, assembler: PromptAssembler) -> None:
        with pytest.raises(RenderError, match="no prompt name"):
            assembler.render(RenderRequest())


class TestAssembleParts:
    """Tests for assemble_parts()."""

    def test_working_dir_first(
        self, assembler: PromptAssembler, tmp_path: Path, write_file
    ) -> None:
        cwd = tmp_path / "work"
        write_file(cwd, "echo.md", "local {0}")

        assert assembler.assemble_parts(cwd, ["echo.md"]) == "local {0}"

    def test_falls_back_to_library(self, assembler: PromptAssembler, tmp_path: Path) -> None:
        cwd = tmp_path / "empty"
        cwd.mkdir()

        assert assembler.assemble_parts(cwd, ["echo.md", "ticket.md"]) == "Echo {0}Ticket {0}\n"

    def test_library_prompt_path_before_root(self, tmp_path: Path, write_file) -> None:
        shared = tmp_path / "shared"
        library = tmp_path / "library"
        write_file(library, "config.toml", f'prompt_path = "{shared.as_posix()}"\n')
        write_file(library, "part.md", "root")
        write_file(shared, "part.md", "shared")
        assembler = PromptAssembler.from_directory(library)

        assert assembler.assemble_parts(tmp_path, ["part.md"]) == "shared"

    def test_absolute_path(self, assembler: PromptAssembler, tmp_path: Path, write_file) -> None:
        part = write_file(tmp_path, "abs/part.md", "absolute")

        assert assembler.assemble_parts(tmp_path, [str(part)]) == "absolute"

    def test_missing_part(self, assembler: PromptAssembler, tmp_path: Path) -> None:
        with pytest.raises(MissingFragmentFileError, match="missing part 'nope.md'"):
            assembler.assemble_parts(tmp_path, ["nope.md"])

    def test_no_parts(self, assembler: PromptAssembler, tmp_path: Path) -> None:
        with pytest.raises(RenderError, match="no parts provided"):
            assembler.assemble_parts(tmp_path, [])

    def test_without_config(self, tmp_path: Path, write_file) -> None:
        """Test parts resolve from the working directory with an empty config."""
        write_file(tmp_path, "a.md", "A")
        assembler = PromptAssembler(MergedConfig(root=tmp_path / "missing"))

        assert assembler.assemble_parts(tmp_path, ["a.md"]) == "A"


class TestDescribe:
    """Tests for describe(), describe_all() and profile()."""

    def test_sequence_summary(self, assembler: PromptAssembler, library: Path) -> None:
        summary = assembler.describe("ticket")

        assert summary.name == "ticket"
        assert summary.kind == "sequence"
        assert summary.description == "Ticket triage"
        assert summary.tags == ("work",)
        assert summary.vars == (0, 1)
        assert summary.stdin_supported is True
        assert summary.last_modified is not None
        assert summary.source_path == library / "config.toml"

    def test_template_summary(self, assembler: PromptAssembler) -> None:
        summary = assembler.describe("troubleshoot")

        assert summary.kind == "template"
        assert summary.vars == ()
        assert summary.stdin_supported is False

    def test_stdin_requires_placeholder_in_first_fragment(
        self, library: Path, write_file
    ) -> None:
        write_file(library, "config.toml", '[prompt.late]\nprompts = ["a.md", "b.md"]\n')
        write_file(library, "a.md", "intro {1}\n")
        write_file(library, "b.md", "body {0}\n")

        summary = PromptAssembler.from_directory(library).describe("late")

        assert summary.vars == (0, 1)
        assert summary.stdin_supported is False

    def test_missing_files_tolerated(self, library: Path, write_file) -> None:
        write_file(library, "config.toml", '[prompt.gone]\nprompts = ["absent.md"]\n')

        summary = PromptAssembler.from_directory(library).describe("gone")

        assert summary.last_modified is None
        assert summary.vars == ()

    def test_to_dict_shape(self, assembler: PromptAssembler) -> None:
        data = assembler.describe("ticket").to_dict()

        assert data["name"] == "ticket"
        assert data["description"] == "Ticket triage"
        assert data["tags"] == ["work"]
        assert data["vars"] == [0, 1]
        assert data["stdin_supported"] is True
        assert "source_path" in data

    def test_to_dict_omits_missing_description(self, assembler: PromptAssembler) -> None:
        assert "description" not in assembler.describe("echo").to_dict()

    def test_describe_all_sorted(self, assembler: PromptAssembler) -> None:
        names = [summary.name for summary in assembler.describe_all()]

        assert names == ["echo", "ticket", "troubleshoot"]

    def test_describe_unknown(self, assembler: PromptAssembler) -> None:
        with pytest.raises(UnknownPromptError):
            assembler.describe("nope")

    def test_sequence_profile(self, assembler: PromptAssembler, library: Path) -> None:
        profile = assembler.profile("ticket")

        assert profile.kind == "sequence"
        assert profile.content == "Ticket {0}\nDetails {{ {1} }}\n"
        assert [part.path for part in profile.parts] == [
            library / "ticket.md",
            library / "details.md",
        ]
        assert profile.template is None

    def test_template_profile(self, assembler: PromptAssembler) -> None:
        data = assembler.profile("troubleshoot").to_dict()

        assert data["kind"] == "template"
        assert data["template"]["content"].startswith("Hello {{ var }}!")
        assert "parts" not in data
