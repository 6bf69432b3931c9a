"""
Code generation stage.

Fallback chain: function calling on the structured provider, then a plain
text request, then a component rendered from a local template. The last
step makes no model call, so a component is produced even when every
provider is down.
"""

import json
import re
from typing import Optional

from pydantic import ValidationError

from matura.models.blueprint import (
    CodeArtifact,
    DesignProfile,
    DesignSystemRecord,
    FunctionSchema,
    IdeaRecord,
    SchemaBlueprint,
)
from matura.services.ai_service import FreeTextGenerator, StructuredGenerator
from matura.stages.base import FREE_TEXT_ROLE, STRUCTURED_ROLE, StageOutput, guarded_call
from matura.utils.constants import CODE_MAX_TOKENS, CODE_TEMPERATURE, CODE_TEXT_MAX_TOKENS
from matura.utils.logger import logger
from matura.utils.templates import load_code_template, load_prompt

CODE_SYSTEM_INSTRUCTION = (
    "Expert React/TypeScript developer. Create a feature-specific application component "
    "with the exact requirements, the given design tokens and specialized business logic. "
    "No generic templates."
)

CODE_FUNCTION = FunctionSchema(
    name="generate_hybrid_react_component",
    description="Generate React component",
    parameters={
        "type": "object",
        "properties": {
            "componentName": {"type": "string"},
            "componentCode": {"type": "string"},
            "typeDefinitions": {"type": "string"},
            "customHooks": {"type": "string"},
            "apiIntegration": {"type": "string"},
            "storybook": {"type": "string"},
        },
        "required": ["componentName", "componentCode"],
    },
)

_CODE_BLOCK = re.compile(r"```(?:tsx|typescript|ts|jsx|javascript|js)?\s*\n([\s\S]*?)```", re.IGNORECASE)
_ASCII_WORD = re.compile(r"[A-Za-z][A-Za-z0-9]*")

TS_TYPES = {
    "string": "string",
    "text": "string",
    "uuid": "string",
    "date": "string",
    "datetime": "string",
    "email": "string",
    "url": "string",
    "number": "number",
    "integer": "number",
    "float": "number",
    "boolean": "boolean",
}


def generate_component_name(idea: IdeaRecord) -> str:
    """PascalCase name from the first two ASCII words of the idea."""
    words = _ASCII_WORD.findall(idea.original)[:2]
    if words:
        return "".join(word[:1].upper() + word[1:].lower() for word in words) + "Manager"
    return f"{idea.category.capitalize()}AppManager"


def _ts_identifier(name: str) -> str:
    return name if re.fullmatch(r"[A-Za-z_$][\w$]*", name) else json.dumps(name)


def _type_definitions(component_name: str, record_type: str, schema: SchemaBlueprint) -> str:
    lines = [f"export interface {component_name}Props {{", "  className?: string;", "}", ""]
    lines.append(f"export interface {record_type} {{")
    lines.append("  id: string;")
    for field in schema.fields:
        if field.name in ("id", "created_at"):
            continue
        optional = "" if field.required else "?"
        lines.append(f"  {_ts_identifier(field.name)}{optional}: {TS_TYPES.get(field.type.lower(), 'string')};")
    lines.append("  created_at: string;")
    lines.append("}")
    return "\n".join(lines)


def _form_inputs(schema: SchemaBlueprint) -> str:
    inputs = []
    for field in schema.fields:
        if field.name in ("id", "created_at"):
            continue
        label = json.dumps(field.label or field.name, ensure_ascii=False)
        key = json.dumps(field.name)
        input_type = "number" if TS_TYPES.get(field.type.lower()) == "number" else "text"
        inputs.append(
            "          <Input\n"
            f"            aria-label={{{label}}}\n"
            f"            placeholder={{{label}}}\n"
            f"            type=\"{input_type}\"\n"
            f"            value={{String(draft[{key}] ?? '')}}\n"
            f"            onChange={{(e) => setDraft({{ ...draft, [{key}]: e.target.value }})}}\n"
            "          />"
        )
    return "\n".join(inputs)


def render_fallback_component(idea: IdeaRecord, design: DesignProfile, schema: SchemaBlueprint) -> CodeArtifact:
    """Deterministic component built from the idea, design and schema records."""
    component_name = generate_component_name(idea)
    record_type = f"{component_name}Record"
    type_definitions = _type_definitions(component_name, record_type, schema)
    title_field = next(
        (f.name for f in schema.fields if f.name not in ("id", "created_at") and _ts_identifier(f.name) == f.name),
        "id",
    )
    primary, secondary, accent, background = design.colorPalette

    code = load_code_template("fallback_component.tsx").safe_substitute(
        type_definitions=type_definitions,
        features_array=json.dumps(idea.keyFeatures[:6], ensure_ascii=False),
        primary=primary,
        secondary=secondary,
        accent=accent,
        background=background,
        component_name=component_name,
        record_type=record_type,
        title_field=title_field,
        heading_font=design.typography.heading.replace("'", ""),
        title=json.dumps(idea.enhanced, ensure_ascii=False),
        description=json.dumps(idea.coreValue, ensure_ascii=False),
        table_label=json.dumps(schema.tableName, ensure_ascii=False),
        form_inputs=_form_inputs(schema),
    )
    return CodeArtifact(
        componentName=component_name,
        componentCode=code,
        typeDefinitions=type_definitions,
    )


def _palette_kwargs(design: DesignProfile):
    primary, secondary, accent, background = design.colorPalette
    return {"primary": primary, "secondary": secondary, "accent": accent, "background": background}


def build_code_prompt(idea: IdeaRecord, design: DesignProfile, design_system: Optional[DesignSystemRecord],
                      schema: SchemaBlueprint) -> str:
    integrated = design_system is not None and design_system.source == "external-integrated"
    design_source = (
        f"Design file tokens: spacing {', '.join(design_system.spacing)}; "
        f"radius {', '.join(design_system.borderRadius)}; components {', '.join(design_system.components)}"
        if integrated else "Default design tokens: modern styling, rounded corners"
    )
    return load_prompt("code_generation").substitute(
        enhanced=idea.enhanced or idea.original,
        component_name=generate_component_name(idea),
        features=", ".join(idea.keyFeatures[:4]) or "core functionality",
        users=", ".join(idea.targetUsers[:3]) or "general users",
        table_name=schema.tableName,
        fields=", ".join(f"{f.name}:{f.type}" for f in schema.fields[:6]),
        business_logic=", ".join(idea.businessLogic[:3]) or "standard operations",
        heading=design.typography.heading,
        body=design.typography.body,
        components=", ".join(design.components[:6]),
        layout=design.layout,
        mood=design.mood,
        design_source=design_source,
        **_palette_kwargs(design),
    )


def build_code_text_prompt(idea: IdeaRecord, schema: SchemaBlueprint) -> str:
    return load_prompt("code_text_fallback").substitute(
        enhanced=idea.enhanced or idea.original,
        category=idea.category,
        table_name=schema.tableName,
        fields=", ".join(f.name for f in schema.fields[:3]),
        component_name=generate_component_name(idea),
    )


def extract_code_block(text: str) -> str:
    match = _CODE_BLOCK.search(text)
    return (match.group(1) if match else text).strip()


class CodeGenerationStage:
    """UI component for the idea, built on the shared schema."""

    name = "code"

    def __init__(self, generator: StructuredGenerator, text_generator: Optional[FreeTextGenerator] = None):
        self.generator = generator
        self.text_generator = text_generator

    async def run(self, idea: IdeaRecord, design: DesignProfile, design_system: Optional[DesignSystemRecord],
                  schema: SchemaBlueprint) -> StageOutput:
        """
        Generate the component.

        Args:
            idea: Enhanced idea
            design: Design inspiration profile
            design_system: Design system record, or None when integration was skipped
            schema: The schema produced by the schema stage for this run

        Returns:
            StageOutput holding a CodeArtifact with non-empty componentCode
        """
        component_name = generate_component_name(idea)
        prompt = build_code_prompt(idea, design, design_system, schema)
        logger.info(f"Generating component {component_name} (prompt {len(prompt)} chars)")

        result = await guarded_call(
            self.generator.invoke(
                CODE_FUNCTION, prompt, CODE_SYSTEM_INSTRUCTION,
                temperature=CODE_TEMPERATURE, max_tokens=CODE_MAX_TOKENS,
            ),
            self.generator.name,
        )
        failure = result.error or "no component code"
        if result.success and isinstance(result.data, dict) and str(result.data.get("componentCode") or "").strip():
            data = result.data
            try:
                artifact = CodeArtifact(
                    componentName=data.get("componentName") or component_name,
                    componentCode=data["componentCode"],
                    typeDefinitions=data.get("typeDefinitions") or "",
                    customHooks=data.get("customHooks"),
                    apiIntegration=data.get("apiIntegration"),
                    storybook=data.get("storybook"),
                )
                logger.info("Component generated with function calling")
                return StageOutput(self.name, artifact, self.generator.name, STRUCTURED_ROLE)
            except ValidationError as e:
                failure = f"invalid component arguments: {e}"

        logger.warning(f"Function calling failed ({failure}), trying text generation")

        if self.text_generator is not None:
            text_result = await guarded_call(
                self.text_generator.generate(
                    build_code_text_prompt(idea, schema),
                    temperature=CODE_TEMPERATURE, max_tokens=CODE_TEXT_MAX_TOKENS,
                ),
                self.text_generator.name,
            )
            if text_result.success and isinstance(text_result.data, str) and extract_code_block(text_result.data):
                artifact = CodeArtifact(
                    componentName=component_name,
                    componentCode=extract_code_block(text_result.data),
                    typeDefinitions="// TypeScript types embedded in component",
                )
                logger.info("Component generated with text fallback")
                return StageOutput(self.name, artifact, self.text_generator.name, FREE_TEXT_ROLE)
            logger.warning(f"Text generation failed: {text_result.error}")

        logger.warning("Both model calls failed, rendering component from template")
        return StageOutput(self.name, render_fallback_component(idea, design, schema))
