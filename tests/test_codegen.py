"""
Tests for template rendering and external formatter helpers.
"""

import shutil
import subprocess
import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import MagicMock, patch

from module_scaffolder.codegen import (
    generate_file_from_template,
    render_template,
    setup_jinja_env,
    write_file,
)
from module_scaffolder.codegen_utils import format_go_files, run_external_tool, tidy_go_module
from module_scaffolder.exceptions import ArtifactWriteError, TemplateRenderError, WarningKind


class TemplateTestCase(TestCase):
    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.templates = self.tmpdir / "templates"
        self.templates.mkdir()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def add_template(self, name, source):
        (self.templates / name).write_text(source, encoding="utf-8")


class TestRenderTemplate(TemplateTestCase):
    """Test cases for render_template"""

    def test_naming_filters(self):
        """Test that naming helpers are available as filters"""
        self.add_template("names.j2", "{{ name | pascal_case }} {{ name | kebab_case }} {{ name | plural }}\n")
        env = setup_jinja_env(self.templates)

        assert render_template(env, "names.j2", {"name": "order_box"}) == "OrderBox order-box order_boxes\n"

    def test_block_whitespace_is_trimmed(self):
        """Test that block tags leave no blank lines behind"""
        self.add_template("loop.j2", "start\n{% for item in items %}\n  {{ item }}\n{% endfor %}\nend\n")
        env = setup_jinja_env(self.templates)

        assert render_template(env, "loop.j2", {"items": ["a", "b"]}) == "start\n  a\n  b\nend\n"

    def test_generated_code_is_not_escaped(self):
        """Test that quotes and angle brackets survive rendering"""
        self.add_template("tag.go.j2", '{{ tag }}')
        env = setup_jinja_env(self.templates)

        assert render_template(env, "tag.go.j2", {"tag": 'json:"items" <T>'}) == 'json:"items" <T>'

    def test_missing_key_raises(self):
        """Test that a template referencing missing data fails loudly"""
        self.add_template("strict.j2", "{{ missing.value }}")
        env = setup_jinja_env(self.templates)

        with self.assertRaises(TemplateRenderError) as ctx:
            render_template(env, "strict.j2", {})
        assert ctx.exception.context["template"] == "strict.j2"

    def test_missing_template_raises(self):
        """Test that an unknown template name is a render error"""
        with self.assertRaises(TemplateRenderError):
            render_template(setup_jinja_env(self.templates), "nope.j2", {})

    def test_bundled_templates_load(self):
        """Test that every bundled template parses"""
        env = setup_jinja_env()
        for name in ("backend/model.go.j2", "backend/init.go.j2", "frontend/store.ts.j2", "frontend/index.vue.j2"):
            assert env.get_template(name) is not None


class TestWriteFile(TemplateTestCase):
    """Test cases for write_file and generate_file_from_template"""

    def test_creates_parent_directories(self):
        """Test that missing directories are created"""
        output = self.tmpdir / "out" / "nested" / "file.go"
        write_file(output, "package nested\n")
        assert output.read_text(encoding="utf-8") == "package nested\n"

    def test_directory_in_the_way(self):
        """Test that an unwritable path raises ArtifactWriteError"""
        output = self.tmpdir / "blocked"
        output.mkdir()
        with self.assertRaises(ArtifactWriteError) as ctx:
            write_file(output, "content")
        assert ctx.exception.path == str(output)

    def test_generate_file_from_template(self):
        """Test rendering straight to disk"""
        self.add_template("hello.j2", "hello {{ name }}\n")
        output = self.tmpdir / "out" / "hello.txt"

        result = generate_file_from_template(setup_jinja_env(self.templates), "hello.j2", {"name": "go"}, output)

        assert result == output
        assert output.read_text(encoding="utf-8") == "hello go\n"


class TestExternalTools(TestCase):
    """Test cases for the formatter and go mod helpers"""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    @patch("module_scaffolder.codegen_utils.shutil.which", return_value=None)
    def test_missing_tool_warns(self, mock_which):
        """Test that a tool not on PATH is reported, not raised"""
        warning = run_external_tool(["gofmt", "-w", "x.go"], self.tmpdir)

        assert warning.kind == WarningKind.EXTERNAL_TOOL_FAILED
        assert "gofmt -w x.go" in warning.message
        mock_which.assert_called_once_with("gofmt")

    @patch("module_scaffolder.codegen_utils.subprocess.run")
    @patch("module_scaffolder.codegen_utils.shutil.which", return_value="/usr/bin/gofmt")
    def test_successful_run(self, mock_which, mock_run):
        """Test that a clean exit produces no warning"""
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")

        assert run_external_tool(["gofmt", "-w", "x.go"], self.tmpdir) is None
        args, kwargs = mock_run.call_args
        assert args[0] == ["gofmt", "-w", "x.go"]
        assert kwargs["cwd"] == str(self.tmpdir)

    @patch("module_scaffolder.codegen_utils.subprocess.run")
    @patch("module_scaffolder.codegen_utils.shutil.which", return_value="/usr/bin/go")
    def test_failed_run_warns(self, mock_which, mock_run):
        """Test that a non-zero exit is reported with the tool output"""
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="missing go.sum entry")

        warning = run_external_tool(["go", "mod", "tidy"], self.tmpdir)

        assert "missing go.sum entry" in warning.message
        assert warning.subject == "go"

    @patch("module_scaffolder.codegen_utils.subprocess.run")
    @patch("module_scaffolder.codegen_utils.shutil.which", return_value="/usr/bin/go")
    def test_timeout_warns(self, mock_which, mock_run):
        """Test that a hanging tool is reported"""
        mock_run.side_effect = subprocess.TimeoutExpired(["go"], 120)
        assert run_external_tool(["go", "mod", "tidy"], self.tmpdir).kind == WarningKind.EXTERNAL_TOOL_FAILED

    @patch("module_scaffolder.codegen_utils.run_external_tool", return_value=None)
    def test_format_go_files_runs_both_formatters(self, mock_tool):
        """Test that goimports runs before gofmt"""
        files = [self.tmpdir / "a.go", self.tmpdir / "b.go"]

        assert format_go_files(files, self.tmpdir) == []
        assert [call.args[0][0] for call in mock_tool.call_args_list] == ["goimports", "gofmt"]
        assert mock_tool.call_args_list[0].args[0][2:] == [str(f) for f in files]

    @patch("module_scaffolder.codegen_utils.run_external_tool")
    def test_format_nothing(self, mock_tool):
        """Test that no files means no formatter runs"""
        assert format_go_files([], self.tmpdir) == []
        mock_tool.assert_not_called()

    @patch("module_scaffolder.codegen_utils.run_external_tool")
    def test_tidy_without_go_mod(self, mock_tool):
        """Test that go mod tidy is skipped outside a Go module"""
        assert tidy_go_module(self.tmpdir) == []
        mock_tool.assert_not_called()

    @patch("module_scaffolder.codegen_utils.run_external_tool", return_value=None)
    def test_tidy_with_go_mod(self, mock_tool):
        """Test that go mod tidy runs in the project root"""
        (self.tmpdir / "go.mod").write_text("module example.com/shop\n", encoding="utf-8")

        assert tidy_go_module(self.tmpdir) == []
        mock_tool.assert_called_once_with(["go", "mod", "tidy"], self.tmpdir)
