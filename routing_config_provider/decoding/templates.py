"""Jinja2 expansion of templated configuration files."""

import os
from typing import Any, Callable, Dict, Optional

from jinja2 import Environment, StrictUndefined, TemplateError

from ..errors import ConfigParseError

TEMPLATE_EXTENSION = ".tmpl"


def _env_lookup(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def default_template_functions() -> Dict[str, Callable[..., Any]]:
    """Functions every template can call."""
    return {'env': _env_lookup}


def render_template(text: str, functions: Optional[Dict[str, Callable[..., Any]]] = None,
                    source: Optional[str] = None) -> str:
    """Expand ``text`` with ``functions`` installed as template globals.

    Raises:
        ConfigParseError: On template syntax errors, undefined names or a
            failing template function
    """
    environment = Environment(undefined=StrictUndefined, keep_trailing_newline=True)
    environment.globals.update(default_template_functions())
    if functions:
        environment.globals.update(functions)

    try:
        return environment.from_string(text).render()
    except TemplateError as e:
        raise ConfigParseError(
            f"Unable to expand template {source or '<string>'}: {e}",
            path=source
        ) from e
    except Exception as e:
        raise ConfigParseError(
            f"Unable to expand template {source or '<string>'}: {type(e).__name__}: {e}",
            path=source
        ) from e
