"""
Schema generation stage: structured provider with a minimal fallback schema.
"""

from typing import Optional

from pydantic import ValidationError

from matura.models.blueprint import (
    DesignProfile,
    DesignSystemRecord,
    FunctionSchema,
    IdeaRecord,
    SchemaBlueprint,
    SchemaField,
)
from matura.services.ai_service import StructuredGenerator
from matura.stages.base import STRUCTURED_ROLE, StageOutput, guarded_call
from matura.utils.constants import SCHEMA_MAX_TOKENS, SCHEMA_TEMPERATURE
from matura.utils.logger import logger
from matura.utils.templates import load_prompt

SCHEMA_SYSTEM_INSTRUCTION = "You are a database architect. Create an optimal schema for the business requirements."

SCHEMA_FUNCTION = FunctionSchema(
    name="generate_advanced_schema",
    description="Generate advanced database schema with business logic",
    parameters={
        "type": "object",
        "properties": {
            "tableName": {"type": "string"},
            "description": {"type": "string"},
            "fields": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "type": {"type": "string"},
                        "required": {"type": "boolean"},
                        "label": {"type": "string"},
                        "validation": {"type": "string"},
                        "defaultValue": {"type": "string"},
                    },
                    "required": ["name", "type"],
                },
            },
            "relationships": {"type": "array", "items": {"type": "string"}},
            "businessLogic": {"type": "array", "items": {"type": "string"}},
            "indexes": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["tableName", "fields", "businessLogic"],
    },
)


def _joined(values, fallback: str) -> str:
    return ", ".join(values) if values else fallback


def build_schema_prompt(idea: IdeaRecord, design: DesignProfile) -> str:
    return load_prompt("schema_generation").substitute(
        enhanced=idea.enhanced or idea.original,
        features=_joined(idea.keyFeatures, "Basic functionality"),
        users=_joined(idea.targetUsers, "General users"),
        business_logic=_joined(idea.businessLogic, "Standard operations"),
        components=_joined(design.components, "Standard UI"),
        layout=design.layout,
    )


def fallback_schema(idea: IdeaRecord) -> SchemaBlueprint:
    return SchemaBlueprint(
        tableName="app_data",
        fields=[
            SchemaField(name="title", type="string", required=True, label="タイトル"),
            SchemaField(name="description", type="text", required=False, label="説明"),
        ],
        relationships=[],
        businessLogic=list(idea.businessLogic),
        indexes=[],
    )


class SchemaGenerationStage:
    """Data schema for the idea via function calling."""

    name = "schema"

    def __init__(self, generator: StructuredGenerator):
        self.generator = generator

    async def run(self, idea: IdeaRecord, design: DesignProfile,
                  design_system: Optional[DesignSystemRecord] = None) -> StageOutput:
        logger.info("Generating data schema")
        if design_system is not None and design_system.source == "external-integrated":
            design = design.model_copy(update={"components": list(design_system.components)})

        result = await guarded_call(
            self.generator.invoke(
                SCHEMA_FUNCTION,
                build_schema_prompt(idea, design),
                SCHEMA_SYSTEM_INSTRUCTION,
                temperature=SCHEMA_TEMPERATURE,
                max_tokens=SCHEMA_MAX_TOKENS,
            ),
            self.generator.name,
        )

        if result.success and isinstance(result.data, dict):
            try:
                schema = SchemaBlueprint.model_validate(result.data)
                logger.info(f"Schema generated: {schema.tableName} ({len(schema.fields)} fields)")
                return StageOutput(self.name, schema, self.generator.name, STRUCTURED_ROLE)
            except ValidationError as e:
                logger.warning(f"Generated schema failed validation: {e}")
        else:
            logger.warning(f"Schema provider failed: {result.error}")

        logger.info("Using minimal fallback schema")
        return StageOutput(self.name, fallback_schema(idea))
