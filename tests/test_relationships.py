"""
Tests for relationship resolution.
"""

from unittest import TestCase

from module_scaffolder.domain.models import Multiplicity, RelationKind
from module_scaffolder.domain.naming import derive_naming
from module_scaffolder.domain.relationships import RelationshipResolver


class TestRelationKind(TestCase):
    """Test cases for relation keyword lookup"""

    def setUp(self):
        self.resolver = RelationshipResolver()

    def test_every_alias(self):
        """Test that each documented spelling maps to its kind"""
        expected = {
            RelationKind.BELONGS_TO: ("belongsTo", "belongs_to", "belongs", "ref", "references"),
            RelationKind.HAS_ONE: ("hasOne", "has_one", "one"),
            RelationKind.HAS_MANY: ("hasMany", "has_many", "many"),
            RelationKind.MANY_TO_MANY: ("manyToMany", "many_to_many", "m2m", "belongsToMany", "toMany"),
        }
        for kind, spellings in expected.items():
            for spelling in spellings:
                assert self.resolver.relation_kind(spelling) == kind, spelling

    def test_unknown_keyword(self):
        """Test that unknown keywords are not relations"""
        assert self.resolver.relation_kind("string") is None
        assert not self.resolver.is_relation_keyword("friendsWith")
        assert self.resolver.resolve("parent", "friendsWith", "User") is None


class TestRelationShapes(TestCase):
    """Test cases for the stored shape of each relation kind"""

    def setUp(self):
        self.resolver = RelationshipResolver(derive_naming("post"))

    def test_single_references_are_nullable(self):
        """Test belongs_to and has_one shapes"""
        for keyword in ("belongsTo", "hasOne"):
            resolution = self.resolver.resolve("author", keyword, "User")
            assert resolution.multiplicity == Multiplicity.ONE
            assert resolution.is_nullable
            assert resolution.go_type() == "*User"

    def test_list_relations_are_not_nullable(self):
        """Test has_many and many_to_many shapes"""
        for keyword in ("hasMany", "m2m"):
            resolution = self.resolver.resolve("comments", keyword)
            assert resolution.multiplicity == Multiplicity.MANY
            assert resolution.is_list
            assert not resolution.is_nullable
            assert resolution.go_type() == "[]*Comment"

    def test_join_table_for_many_to_many(self):
        """Test that many-to-many relations name their join table"""
        resolution = self.resolver.resolve("tags", "manyToMany")
        assert resolution.join_table == "post_tags"
        assert self.resolver.resolve("categories", "m2m").join_table == "post_categories"

    def test_no_join_table_for_other_kinds(self):
        """Test that only many-to-many relations get a join table"""
        assert self.resolver.resolve("comments", "hasMany").join_table is None

    def test_no_join_table_without_module(self):
        """Test that a resolver without a module cannot name join tables"""
        assert RelationshipResolver().resolve("tags", "m2m").join_table is None


class TestRelatedModel(TestCase):
    """Test cases for related model naming"""

    def setUp(self):
        self.resolver = RelationshipResolver()

    def test_explicit_related_model_is_pascal_cased(self):
        """Test canonicalization of the third token"""
        resolution = self.resolver.resolve("parent", "belongsTo", "product_category")
        assert resolution.related_model == "ProductCategory"
        assert resolution.related_explicit

    def test_inferred_related_model(self):
        """Test inference from the field name"""
        assert self.resolver.resolve("tags", "m2m").related_model == "Tag"
        assert self.resolver.resolve("categories", "hasMany").related_model == "Category"
        assert self.resolver.resolve("author_id", "belongsTo").related_model == "Author"
        assert not self.resolver.resolve("tags", "m2m").related_explicit

    def test_inference_keeps_compound_prefix(self):
        """Test that only the last word is singularized"""
        assert RelationshipResolver.infer_related_model("order_lines") == "OrderLine"
        assert RelationshipResolver.infer_related_model("billingAddress") == "BillingAddress"
