# File: schemagen/service_generator.py
"""
SchemaGen - Service Class Generator
====================================
Renders one PHP service class per table into
``<output>/Services/<Class>Service.php``.

Cascade logic is derived from ``hasMany`` relationships only; the owning
side of a ``belongsTo`` already holds the foreign key and needs no extra
persistence step.

* create — children in the payload under the accessor name are bulk-created;
* update — children in the payload replace the existing set (delete, then
  bulk-create; no merge or upsert);
* delete — all children are deleted, one level deep, regardless of payload.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from schemagen.model_generator import MODELS_DIRECTORY
from schemagen.models import RelationshipSet, SchemaGraph, TableSchema
from schemagen.templates import SERVICE_TEMPLATE, TemplateEmitter
from schemagen.utils import (
    class_name_of,
    format_quoted_list,
    relation_accessor_name,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.service_generator")

SERVICES_DIRECTORY: str = "Services"
SERVICE_SUFFIX: str = "Service"

# ---------------------------------------------------------------------------
# Cascade statement templates
# ---------------------------------------------------------------------------

_CREATE_TEMPLATE: str = (
    "if (isset($data['{name}'])) {{\n"
    "    $model->{name}()->createMany($data['{name}']);\n"
    "}}\n"
)

_UPDATE_TEMPLATE: str = (
    "if (isset($data['{name}'])) {{\n"
    "    $model->{name}()->delete();\n"
    "    $model->{name}()->createMany($data['{name}']);\n"
    "}}\n"
)

_DELETE_TEMPLATE: str = "$model->{name}()->delete();\n"


# ---------------------------------------------------------------------------
# Block builders
# ---------------------------------------------------------------------------


def relationship_names(relationships: RelationshipSet) -> List[str]:
    """All accessor names: ``belongsTo`` first, then ``hasMany``."""
    names: List[str] = [
        relation_accessor_name(rel.target_table, plural=False)
        for rel in relationships.belongs_to
    ]
    names.extend(
        relation_accessor_name(rel.target_table, plural=True)
        for rel in relationships.has_many
    )
    return names


def _has_many_names(relationships: RelationshipSet) -> List[str]:
    return [
        relation_accessor_name(rel.target_table, plural=True)
        for rel in relationships.has_many
    ]


def build_create_logic(relationships: RelationshipSet) -> str:
    return "".join(
        _CREATE_TEMPLATE.format(name=name) for name in _has_many_names(relationships)
    )


def build_update_logic(relationships: RelationshipSet) -> str:
    return "".join(
        _UPDATE_TEMPLATE.format(name=name) for name in _has_many_names(relationships)
    )


def build_delete_logic(relationships: RelationshipSet) -> str:
    return "".join(
        _DELETE_TEMPLATE.format(name=name) for name in _has_many_names(relationships)
    )


# ---------------------------------------------------------------------------
# ServiceCodeGenerator
# ---------------------------------------------------------------------------


class ServiceCodeGenerator:
    """
    Stateless service-class renderer.

    Usage::

        gen = ServiceCodeGenerator()
        written = gen.generate(graph, template_text, "App", Path("./out"))
    """

    def __init__(self) -> None:
        self._emitter: TemplateEmitter = TemplateEmitter(SERVICE_TEMPLATE)

    @staticmethod
    def service_class_name(table_name: str) -> str:
        return f"{class_name_of(table_name)}{SERVICE_SUFFIX}"

    def render(self, table: TableSchema, template_text: str, namespace: str) -> str:
        """Render the service file content for one table."""
        rels: RelationshipSet = table.relationships
        values: Dict[str, str] = {
            "namespace": f"{namespace}\\{SERVICES_DIRECTORY}",
            "modelNamespace": f"{namespace}\\{MODELS_DIRECTORY}",
            "className": self.service_class_name(table.name),
            "modelClass": class_name_of(table.name),
            "relationshipsArray": format_quoted_list(relationship_names(rels)),
            "relatedCreateLogic": build_create_logic(rels),
            "relatedUpdateLogic": build_update_logic(rels),
            "relatedDeleteLogic": build_delete_logic(rels),
        }
        return self._emitter.render(template_text, values)

    def generate(
        self,
        graph: SchemaGraph,
        template_text: str,
        namespace: str,
        output_root: Path,
    ) -> List[Path]:
        """
        Write one service file per table, in graph order.

        Returns the written paths.

        Raises:
            GenerationError: if ``Services/`` cannot be created or a file
                cannot be written.
        """
        services_dir: Path = self._emitter.prepare_directory(
            Path(output_root) / SERVICES_DIRECTORY
        )
        written: List[Path] = []
        for table in graph.tables:
            content: str = self.render(table, template_text, namespace)
            filename: str = f"{self.service_class_name(table.name)}.php"
            written.append(self._emitter.emit(services_dir, filename, content))
            logger.debug(
                "Service for '%s': %d hasMany cascades.",
                table.name,
                len(table.relationships.has_many),
            )

        logger.info("Generated %d service classes in %s.", len(written), services_dir)
        return written


__all__: List[str] = [
    "SERVICES_DIRECTORY",
    "SERVICE_SUFFIX",
    "ServiceCodeGenerator",
    "relationship_names",
    "build_create_logic",
    "build_update_logic",
    "build_delete_logic",
]
