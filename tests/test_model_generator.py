"""
tests/test_model_generator.py
Unit tests for schemagen.model_generator (ModelCodeGenerator).

Tests cover:
- Accessor method rendering for belongsTo and hasMany
- Accessor ordering
- Full model file rendering from the bundled stub
- Writing Models/<Class>.php files
"""

from __future__ import annotations

import pathlib

import pytest

from schemagen.errors import GenerationError
from schemagen.introspection import derive_relationships
from schemagen.model_generator import (
    MODELS_DIRECTORY,
    ModelCodeGenerator,
    build_accessor,
    build_relationships_block,
)
from schemagen.models import ForeignKeySchema, SchemaGraph, TableSchema


class TestBuildAccessor:
    def test_belongs_to(self) -> None:
        out = build_accessor("belongsTo", "product", "App\\Models", "Product", "product_id", "id")
        assert out == (
            "\n"
            "    public function product()\n"
            "    {\n"
            "        return $this->belongsTo(\\App\\Models\\Product::class, 'product_id', 'id');\n"
            "    }\n"
        )

    def test_has_many(self) -> None:
        out = build_accessor("hasMany", "orderItems", "App\\Models", "OrderItem", "product_id", "id")
        assert "public function orderItems()" in out
        assert "$this->hasMany(\\App\\Models\\OrderItem::class, 'product_id', 'id');" in out


class TestBuildRelationshipsBlock:
    def test_empty(self, shop_graph: SchemaGraph) -> None:
        rels = shop_graph.get_table("tags").relationships
        assert build_relationships_block(rels, "App\\Models") == ""

    def test_belongs_to_before_has_many(self) -> None:
        graph = derive_relationships(
            [
                TableSchema(
                    name="posts",
                    foreign_keys=(
                        ForeignKeySchema(column="user_id", referenced_table="users", referenced_column="id"),
                    ),
                ),
                TableSchema(
                    name="comments",
                    foreign_keys=(
                        ForeignKeySchema(column="post_id", referenced_table="posts", referenced_column="id"),
                    ),
                ),
                TableSchema(name="users"),
            ]
        )
        block = build_relationships_block(graph.get_table("posts").relationships, "App\\Models")
        assert block.index("function user()") < block.index("function comments()")


class TestModelRender:
    def test_order_items_model(self, shop_graph: SchemaGraph, model_template_text: str) -> None:
        out = ModelCodeGenerator().render(
            shop_graph.get_table("order_items"), model_template_text, "App"
        )
        assert "namespace App\\Models;" in out
        assert "class OrderItem extends Model" in out
        assert "protected $table = 'order_items';" in out
        assert "public function product()" in out
        assert "belongsTo(\\App\\Models\\Product::class, 'product_id', 'id')" in out
        assert "hasMany" not in out
        assert "{{" not in out

    def test_products_model(self, shop_graph: SchemaGraph, model_template_text: str) -> None:
        out = ModelCodeGenerator().render(
            shop_graph.get_table("products"), model_template_text, "App"
        )
        assert "class Product extends Model" in out
        assert "public function orderItems()" in out
        assert "hasMany(\\App\\Models\\OrderItem::class, 'product_id', 'id')" in out

    def test_isolated_model_has_no_accessors(
        self, shop_graph: SchemaGraph, model_template_text: str
    ) -> None:
        out = ModelCodeGenerator().render(shop_graph.get_table("tags"), model_template_text, "App")
        assert "class Tag extends Model" in out
        assert "public function" not in out
        assert out.rstrip().endswith("}")

    def test_unknown_placeholders_preserved(self, shop_graph: SchemaGraph) -> None:
        template = "{{className}} {{author}} {{tableName}}"
        out = ModelCodeGenerator().render(shop_graph.get_table("tags"), template, "App")
        assert out == "Tag {{author}} tags"


class TestModelGenerate:
    def test_writes_one_file_per_table(
        self, shop_graph: SchemaGraph, model_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        written = ModelCodeGenerator().generate(shop_graph, model_template_text, "App", tmp_path)
        assert [p.name for p in written] == ["OrderItem.php", "Product.php", "Tag.php"]
        assert all(p.parent == tmp_path / MODELS_DIRECTORY for p in written)
        assert all(p.is_file() for p in written)

    def test_overwrites_existing_files(
        self, shop_graph: SchemaGraph, model_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        stale = tmp_path / MODELS_DIRECTORY / "Tag.php"
        stale.parent.mkdir(parents=True)
        stale.write_text("stale", encoding="utf-8")
        ModelCodeGenerator().generate(shop_graph, model_template_text, "App", tmp_path)
        assert "class Tag extends Model" in stale.read_text(encoding="utf-8")

    def test_empty_graph_creates_directory_only(
        self, model_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        written = ModelCodeGenerator().generate(SchemaGraph(), model_template_text, "App", tmp_path)
        assert written == []
        assert (tmp_path / MODELS_DIRECTORY).is_dir()

    def test_unwritable_output_root(
        self, shop_graph: SchemaGraph, model_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(GenerationError):
            ModelCodeGenerator().generate(shop_graph, model_template_text, "App", blocker)
