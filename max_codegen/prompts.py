from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    loader = FileSystemLoader(str(TEMPLATE_DIR))
    return Environment(loader=loader, autoescape=False, undefined=StrictUndefined)


def render(template_name: str, **context) -> str:
    return _get_env().get_template(template_name).render(**context).strip()


@lru_cache(maxsize=1)
def persona() -> str:
    """Fixed system persona seeded as the first turn of every conversation."""
    return (TEMPLATE_DIR / "persona.txt").read_text(encoding="utf-8").strip()
