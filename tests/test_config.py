"""
Tests for configuration loading and project inspection.
"""

import argparse
import shutil
import tempfile
from pathlib import Path
from unittest import TestCase

from module_scaffolder.config import (
    ScaffoldConfig,
    detect_frontend_dir,
    load_config,
    read_go_module,
)
from module_scaffolder.exceptions import ConfigurationError


class ConfigTestCase(TestCase):
    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def write(self, relative, content=""):
        path = self.tmpdir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path


class TestScaffoldConfig(TestCase):
    """Test cases for the configuration schema"""

    def test_defaults(self):
        """Test the default locations"""
        config = ScaffoldConfig()
        assert config.backend_dir == "app"
        assert config.registry_file == "app/init.go"
        assert config.registry_manifest == "app/modules.yaml"
        assert config.catalog_file == ".scaffold/catalog.yaml"
        assert config.default_display_field == "name"
        assert config.api_base == "/api"
        assert config.run_formatters

    def test_derived_paths(self):
        """Test that every path hangs off the project root"""
        config = ScaffoldConfig(project_root="/srv/shop")
        assert config.backend_path == Path("/srv/shop/app")
        assert config.registry_path == Path("/srv/shop/app/init.go")
        assert config.manifest_path == Path("/srv/shop/app/modules.yaml")
        assert config.catalog_path == Path("/srv/shop/.scaffold/catalog.yaml")

    def test_explicit_frontend_dir(self):
        """Test that a configured client directory skips detection"""
        config = ScaffoldConfig(project_root="/srv/shop", frontend_dir="web")
        assert config.frontend_path == Path("/srv/shop/web")

    def test_api_base_trailing_slash_is_dropped(self):
        """Test api_base normalization"""
        assert ScaffoldConfig(api_base="/api/v1/").api_base == "/api/v1"

    def test_invalid_values(self):
        """Test the field validators"""
        with self.assertRaises(ValueError):
            ScaffoldConfig(api_base="api")
        with self.assertRaises(ValueError):
            ScaffoldConfig(default_display_field="Title")
        with self.assertRaises(ValueError):
            ScaffoldConfig(go_module="example.com/my shop")

    def test_explicit_go_module_wins(self):
        """Test that a configured Go module is not read from go.mod"""
        assert ScaffoldConfig(go_module=" example.com/shop ").resolved_go_module() == "example.com/shop"


class TestLoadConfig(ConfigTestCase):
    """Test cases for load_config"""

    def test_yaml_file(self):
        """Test loading options from a YAML file"""
        config_file = self.write("scaffold.yaml", "backend_dir: internal\ndefault_display_field: title\n")

        config = load_config(str(config_file), {"project_root": str(self.tmpdir)})

        assert config.backend_dir == "internal"
        assert config.default_display_field == "title"

    def test_cli_overrides_file(self):
        """Test that explicit CLI arguments override the file"""
        config_file = self.write("scaffold.yaml", "verbose: false\nrun_formatters: true\n")
        args = argparse.Namespace(
            project_root=str(self.tmpdir), verbose=True, run_formatters=None, command="generate"
        )

        config = load_config(str(config_file), args)

        assert config.verbose
        assert config.run_formatters

    def test_project_root_is_resolved(self):
        """Test that the project root becomes absolute"""
        config = load_config(None, {"project_root": "."})
        assert Path(config.project_root).is_absolute()

    def test_missing_file_uses_defaults(self):
        """Test that a missing config file is not fatal"""
        config = load_config(str(self.tmpdir / "missing.yaml"))
        assert config.backend_dir == "app"

    def test_invalid_yaml(self):
        """Test that unparsable YAML is a configuration error"""
        config_file = self.write("scaffold.yaml", "backend_dir: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_config(str(config_file))

    def test_non_mapping(self):
        """Test that a YAML list is rejected"""
        config_file = self.write("scaffold.yaml", "- app\n- web\n")
        with self.assertRaises(ConfigurationError):
            load_config(str(config_file))

    def test_validation_error_lists_fields(self):
        """Test that schema violations name the offending option"""
        config_file = self.write("scaffold.yaml", "api_base: api\n")
        with self.assertRaises(ConfigurationError) as ctx:
            load_config(str(config_file))
        assert "api_base" in ctx.exception.context
        assert ctx.exception.error_code == "CONFIG_ERROR"


class TestProjectInspection(ConfigTestCase):
    """Test cases for go.mod and client project detection"""

    def test_read_go_module(self):
        """Test reading the module path"""
        self.write("go.mod", "// comment\nmodule example.com/shop\n\ngo 1.22\n")
        assert read_go_module(self.tmpdir) == "example.com/shop"

    def test_read_go_module_fallback(self):
        """Test the fallback module name"""
        assert read_go_module(self.tmpdir) == "base"
        self.write("go.mod", "go 1.22\n")
        assert read_go_module(self.tmpdir) == "base"

    def test_root_is_a_nuxt_project(self):
        """Test a client project living at the root"""
        self.write("nuxt.config.ts")
        (self.tmpdir / "app" / "pages").mkdir(parents=True)
        assert detect_frontend_dir(self.tmpdir) == self.tmpdir

    def test_app_suffix_directory(self):
        """Test a sibling '*-app' client project"""
        self.write("admin-app/nuxt.config.ts")
        self.write("frontend/nuxt.config.ts")
        assert detect_frontend_dir(self.tmpdir) == self.tmpdir / "admin-app"

    def test_standard_directory(self):
        """Test the standard client directory names"""
        self.write("frontend/nuxt.config.ts")
        assert detect_frontend_dir(self.tmpdir) == self.tmpdir / "frontend"

    def test_nothing_detected(self):
        """Test that detection falls back to the project root"""
        assert detect_frontend_dir(self.tmpdir) == self.tmpdir
