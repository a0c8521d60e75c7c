"""
Tests for the module catalog.
"""

import shutil
import tempfile
from pathlib import Path
from unittest import TestCase

import yaml

from module_scaffolder.catalog import CATALOG_VERSION, ModuleCatalog, default_catalog
from module_scaffolder.domain.aggregator import aggregate
from module_scaffolder.domain.field_compiler import compile_fields
from module_scaffolder.domain.naming import derive_naming


def build(name, declarations):
    naming = derive_naming(name)
    return aggregate(naming, compile_fields(declarations, naming).fields, "example.com/shop")


class TestModuleCatalog(TestCase):
    """Test cases for ModuleCatalog"""

    def setUp(self):
        self.tmpdir = Path(tempfile.mkdtemp())
        self.path = self.tmpdir / ".scaffold" / "catalog.yaml"
        self.catalog = ModuleCatalog(self.path)

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_missing_file_is_empty(self):
        """Test that an absent catalog has no entries"""
        assert self.catalog.entries == {}
        assert self.catalog.display_field_for("User") is None

    def test_record_persists_yaml(self):
        """Test that recording a module writes the catalog file"""
        self.catalog.record(build("user", ["id:uint", "email:email", "name:string"]))

        data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        assert data["version"] == CATALOG_VERSION
        assert data["modules"]["user"]["model"] == "User"
        assert data["modules"]["user"]["plural_kebab"] == "users"

    def test_display_field_survives_reload(self):
        """Test that a fresh catalog reads what another one recorded"""
        self.catalog.record(build("user", ["id:uint", "email:email", "name:string"]))

        reloaded = ModuleCatalog(self.path)
        assert reloaded.display_field_for("User") == "email"
        assert reloaded.display_field_for("user") == "email"

    def test_display_field_skips_relations_and_numbers(self):
        """Test that only text fields are label candidates"""
        self.catalog.record(build("order", ["customer:belongsTo", "total:decimal", "reference:string"]))
        assert self.catalog.display_field_for("Order") == "reference"

    def test_translatable_field_is_a_label(self):
        """Test that translatable text can label a module"""
        self.catalog.record(build("product_category", ["name:translation", "sort_order:int"]))
        assert self.catalog.display_field_for("ProductCategory") == "name"

    def test_module_without_text_has_no_display_field(self):
        """Test a module with no label candidates"""
        self.catalog.record(build("rating", ["score:int"]))
        assert self.catalog.lookup("Rating") is not None
        assert self.catalog.display_field_for("Rating") is None

    def test_record_replaces_entry(self):
        """Test that re-recording a module replaces its fields"""
        self.catalog.record(build("user", ["name:string"]))
        self.catalog.record(build("user", ["email:string"]))
        assert ModuleCatalog(self.path).display_field_for("User") == "email"

    def test_remove(self):
        """Test dropping a module"""
        self.catalog.record(build("user", ["name:string"]))

        assert self.catalog.remove("User")
        assert not self.catalog.remove("User")
        assert ModuleCatalog(self.path).entries == {}

    def test_unreadable_file_is_ignored(self):
        """Test that invalid YAML does not stop generation"""
        self.path.parent.mkdir(parents=True)
        self.path.write_text("modules: [unclosed\n", encoding="utf-8")
        assert self.catalog.entries == {}

    def test_malformed_entry_is_skipped(self):
        """Test that one bad entry does not hide the others"""
        self.catalog.record(build("user", ["name:string"]))
        data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        data["modules"]["broken"] = {"model": "Broken"}
        self.path.write_text(yaml.safe_dump(data), encoding="utf-8")

        entries = ModuleCatalog(self.path).entries
        assert list(entries) == ["user"]

    def test_default_location(self):
        """Test the default catalog path under the project root"""
        catalog = default_catalog(self.tmpdir)
        assert catalog.path == self.tmpdir / ".scaffold" / "catalog.yaml"
