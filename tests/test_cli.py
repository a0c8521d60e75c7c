"""
Tests for the command line interface.
"""

import shutil
import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

from module_scaffolder.cli import build_parser, main, run_destroy, split_target
from module_scaffolder.config import ScaffoldConfig
from module_scaffolder.emission import Target
from module_scaffolder.exceptions import DeclarationError, GenerationReport, GenerationWarning, WarningKind


class TestSplitTarget(TestCase):
    """Test cases for split_target"""

    def test_without_target(self):
        """Test that the first word is the module name"""
        assert split_target(["product", "name:string"]) == (None, "product", ["name:string"])

    def test_with_target(self):
        """Test that a leading target word is separated"""
        assert split_target(["FE", "product", "name:string"]) == ("FE", "product", ["name:string"])

    def test_target_word_alone_is_a_module_name(self):
        """Test that a target word with nothing after it names the module"""
        assert split_target(["api"]) == (None, "api", [])


class TestBuildParser(TestCase):
    """Test cases for the argument parser"""

    def test_generate_alias(self):
        """Test the short command alias"""
        args = build_parser().parse_args(["g", "product", "name:string"])
        assert args.command == "g"
        assert args.words == ["product", "name:string"]

    def test_unset_flags_are_none(self):
        """Test that flags left out do not override the config file"""
        args = build_parser().parse_args(["generate", "product"])
        assert args.verbose is None
        assert args.use_colors is None
        assert args.run_formatters is None

    def test_negative_flags(self):
        """Test the --no-* switches"""
        args = build_parser().parse_args(["--no-color", "--no-format", "-v", "destroy", "product"])
        assert args.use_colors is False
        assert args.run_formatters is False
        assert args.verbose is True

    def test_command_is_required(self):
        """Test that running without a command is a usage error"""
        with self.assertRaises(SystemExit):
            build_parser().parse_args([])


@patch("module_scaffolder.cli.setup_colored_logging")
class TestMain(TestCase):
    """Test cases for main"""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def run_main(self, *words):
        main(["-p", str(self.tmpdir), "--no-format", *words])

    @patch("module_scaffolder.cli.ModuleGenerator")
    def test_generate_dispatch(self, mock_generator, mock_logging):
        """Test that generate passes the name, declarations and target"""
        mock_generator.return_value.generate.return_value = GenerationReport()

        self.run_main("generate", "fe", "product", "name:string", "price:decimal")

        config = mock_generator.call_args.args[0]
        assert isinstance(config, ScaffoldConfig)
        assert config.run_formatters is False
        assert Path(config.project_root) == self.tmpdir.resolve()
        mock_generator.return_value.generate.assert_called_once_with(
            "product", ["name:string", "price:decimal"], [Target.FRONTEND]
        )

    @patch("module_scaffolder.cli.ModuleGenerator")
    def test_generate_both_targets_by_default(self, mock_generator, mock_logging):
        """Test that no target word runs both phases"""
        mock_generator.return_value.generate.return_value = GenerationReport()

        self.run_main("g", "api")

        mock_generator.return_value.generate.assert_called_once_with("api", [], [Target.BACKEND, Target.FRONTEND])

    @patch("module_scaffolder.cli.ModuleGenerator")
    def test_warnings_do_not_fail(self, mock_generator, mock_logging):
        """Test that a run with warnings still exits normally"""
        report = GenerationReport(warnings=[GenerationWarning(WarningKind.UNKNOWN_ALIAS, "Unknown type 'foo'")])
        mock_generator.return_value.generate.return_value = report

        with self.assertLogs("module_scaffolder.cli", level="WARNING") as logs:
            self.run_main("generate", "tag", "label:foo")
        assert any("unknown_alias" in message for message in logs.output)

    @patch("module_scaffolder.cli.ModuleGenerator")
    def test_scaffold_error_exits(self, mock_generator, mock_logging):
        """Test that a declaration error exits with status 1"""
        mock_generator.return_value.generate.side_effect = DeclarationError("bad", token=":int")

        with self.assertRaises(SystemExit) as ctx:
            self.run_main("generate", "post", ":int")
        assert ctx.exception.code == 1

    def test_destroy_extra_arguments_exit(self, mock_logging):
        """Test that destroy rejects field declarations"""
        with self.assertRaises(SystemExit) as ctx:
            self.run_main("destroy", "post", "title:string")
        assert ctx.exception.code == 1

    def test_invalid_config_exits(self, mock_logging):
        """Test that an invalid config file exits with status 1"""
        config_file = self.tmpdir / "scaffold.yaml"
        config_file.write_text("api_base: api\n", encoding="utf-8")

        with self.assertRaises(SystemExit) as ctx:
            main(["-c", str(config_file), "-p", str(self.tmpdir), "generate", "post"])
        assert ctx.exception.code == 1

    def test_generate_end_to_end(self, mock_logging):
        """Test a real backend generation through the command line"""
        (self.tmpdir / "go.mod").write_text("module example.com/shop\n", encoding="utf-8")

        self.run_main("generate", "be", "product", "name:string")

        assert (self.tmpdir / "app" / "models" / "product.go").is_file()
        assert (self.tmpdir / "app" / "products" / "module.go").is_file()
        assert 'modules["products"]' in (self.tmpdir / "app" / "init.go").read_text(encoding="utf-8")


class TestRunDestroy(TestCase):
    """Test cases for run_destroy"""

    @patch("module_scaffolder.cli.ModuleDestroyer")
    def test_target_word(self, mock_destroyer):
        """Test that destroy honours the target word"""
        mock_destroyer.return_value.destroy.return_value = GenerationReport()
        config = ScaffoldConfig()

        run_destroy(config, ["backend", "product"])

        mock_destroyer.assert_called_once_with(config)
        mock_destroyer.return_value.destroy.assert_called_once_with("product", [Target.BACKEND])
