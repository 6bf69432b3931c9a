import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from matura.api import generate_app
from matura.factory import create_pipeline

app = typer.Typer()


@app.callback()
def main():
    """
    Matura: turn a one-line app idea into an application blueprint.
    """


@app.command()
def generate(
    idea: str,
    mode: str = typer.Option("balanced", help="creative, professional, experimental or balanced"),
    creativity: str = typer.Option("medium", help="low, medium or high"),
    quality: str = typer.Option("quality", help="speed, quality or creativity"),
    design_system: bool = typer.Option(True, "--design-system/--no-design-system"),
    output: Optional[Path] = typer.Option(None, help="Write the blueprint JSON here instead of stdout"),
):
    """
    Generate an idea, design, schema and React component for IDEA.
    """
    config = {
        "mode": mode,
        "creativityLevel": creativity,
        "qualityPriority": quality,
        "useDesignSystem": design_system,
    }

    typer.echo("Generating blueprint...", err=True)
    result = asyncio.run(generate_app(idea, config, pipeline=create_pipeline()))
    payload = json.dumps(result.model_dump(by_alias=True), ensure_ascii=False, indent=2)

    if output:
        output.write_text(payload, encoding="utf-8")
        typer.echo(f"Blueprint written to {output}", err=True)
    else:
        typer.echo(payload)

    metadata = result.metadata
    typer.echo(
        f"Done in {metadata.processingTimeMs}ms using {', '.join(metadata.providersUsed) or 'fallbacks only'}",
        err=True,
    )


if __name__ == "__main__":
    app()
