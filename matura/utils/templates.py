from functools import lru_cache
from pathlib import Path
from string import Template

PACKAGE_ROOT = Path(__file__).parent.parent


@lru_cache(maxsize=None)
def load_prompt(name: str) -> Template:
    """Prompt template from matura/prompts/<name>.txt."""
    with open(PACKAGE_ROOT / "prompts" / f"{name}.txt", 'r', encoding='utf-8') as prompt_file:
        return Template(prompt_file.read())


@lru_cache(maxsize=None)
def load_code_template(name: str) -> Template:
    """Code template from matura/templates/<name>.tmpl."""
    with open(PACKAGE_ROOT / "templates" / f"{name}.tmpl", 'r', encoding='utf-8') as template_file:
        return Template(template_file.read())
