"""
tests/test_service_generator.py
Unit tests for schemagen.service_generator (ServiceCodeGenerator).

Tests cover:
- Relationship name lists
- Create / update / delete cascade blocks
- Full service file rendering from the bundled stub
- Writing Services/<Class>Service.php files
"""

from __future__ import annotations

import pathlib

from schemagen.models import SchemaGraph
from schemagen.service_generator import (
    SERVICES_DIRECTORY,
    ServiceCodeGenerator,
    build_create_logic,
    build_delete_logic,
    build_update_logic,
    relationship_names,
)


class TestCascadeBlocks:
    def test_relationship_names(self, shop_graph: SchemaGraph) -> None:
        assert relationship_names(shop_graph.get_table("order_items").relationships) == ["product"]
        assert relationship_names(shop_graph.get_table("products").relationships) == ["orderItems"]
        assert relationship_names(shop_graph.get_table("tags").relationships) == []

    def test_create_logic(self, shop_graph: SchemaGraph) -> None:
        rels = shop_graph.get_table("products").relationships
        assert build_create_logic(rels) == (
            "if (isset($data['orderItems'])) {\n"
            "    $model->orderItems()->createMany($data['orderItems']);\n"
            "}\n"
        )

    def test_update_logic_replaces_children(self, shop_graph: SchemaGraph) -> None:
        rels = shop_graph.get_table("products").relationships
        assert build_update_logic(rels) == (
            "if (isset($data['orderItems'])) {\n"
            "    $model->orderItems()->delete();\n"
            "    $model->orderItems()->createMany($data['orderItems']);\n"
            "}\n"
        )

    def test_delete_logic(self, shop_graph: SchemaGraph) -> None:
        rels = shop_graph.get_table("products").relationships
        assert build_delete_logic(rels) == "$model->orderItems()->delete();\n"

    def test_belongs_to_only_produces_no_cascades(self, shop_graph: SchemaGraph) -> None:
        rels = shop_graph.get_table("order_items").relationships
        assert build_create_logic(rels) == ""
        assert build_update_logic(rels) == ""
        assert build_delete_logic(rels) == ""


class TestServiceRender:
    def test_products_service(self, shop_graph: SchemaGraph, service_template_text: str) -> None:
        out = ServiceCodeGenerator().render(
            shop_graph.get_table("products"), service_template_text, "App"
        )
        assert "namespace App\\Services;" in out
        assert "use App\\Models\\Product;" in out
        assert "class ProductService" in out
        assert "protected array $relationships = ['orderItems'];" in out
        assert "$model->orderItems()->createMany($data['orderItems']);" in out
        assert "$model->orderItems()->delete();" in out
        assert "{{" not in out

    def test_order_items_service(self, shop_graph: SchemaGraph, service_template_text: str) -> None:
        out = ServiceCodeGenerator().render(
            shop_graph.get_table("order_items"), service_template_text, "App"
        )
        assert "class OrderItemService" in out
        assert "protected array $relationships = ['product'];" in out
        assert "createMany" not in out

    def test_isolated_service(self, shop_graph: SchemaGraph, service_template_text: str) -> None:
        out = ServiceCodeGenerator().render(
            shop_graph.get_table("tags"), service_template_text, "App"
        )
        assert "protected array $relationships = [];" in out

    def test_unknown_placeholders_preserved(self, shop_graph: SchemaGraph) -> None:
        out = ServiceCodeGenerator().render(
            shop_graph.get_table("tags"), "{{className}}:{{generatedAt}}", "App"
        )
        assert out == "TagService:{{generatedAt}}"


class TestServiceGenerate:
    def test_writes_one_file_per_table(
        self, shop_graph: SchemaGraph, service_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        written = ServiceCodeGenerator().generate(
            shop_graph, service_template_text, "App", tmp_path
        )
        assert [p.name for p in written] == [
            "OrderItemService.php",
            "ProductService.php",
            "TagService.php",
        ]
        assert all(p.parent == tmp_path / SERVICES_DIRECTORY for p in written)

    def test_rerun_is_byte_identical(
        self, shop_graph: SchemaGraph, service_template_text: str, tmp_path: pathlib.Path
    ) -> None:
        gen = ServiceCodeGenerator()
        first = [p.read_bytes() for p in gen.generate(shop_graph, service_template_text, "App", tmp_path)]
        second = [p.read_bytes() for p in gen.generate(shop_graph, service_template_text, "App", tmp_path)]
        assert first == second
