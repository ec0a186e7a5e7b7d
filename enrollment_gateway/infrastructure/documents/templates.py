"""Email templates with literal {{placeholder}} substitution"""

import html
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from enrollment_gateway.config import settings

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"


def render_template(template: str, values: Mapping[str, object]) -> str:
    """
    Replace every {{name}} with str(values[name]).

    No conditionals or loops; callers pre-compute everything. Placeholders
    without a value are left untouched.
    """
    rendered = template
    for name, value in values.items():
        rendered = rendered.replace("{{" + name + "}}", str(value))
    return rendered


def escape_values(values: Mapping[str, object]) -> dict:
    """HTML-escape values bound for the HTML variant of a template"""
    return {name: html.escape(str(value)) for name, value in values.items()}


class TemplateStore:
    """Loads HTML and plaintext templates from a directory"""

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory or settings.templates_dir or DEFAULT_TEMPLATES_DIR)

    def load(self, name: str) -> str:
        """
        Load a template by file name, e.g. "payment-confirmation.html".

        Raises:
            FileNotFoundError: Unknown template
        """
        return _read(self.directory / name)


@lru_cache(maxsize=32)
def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")
