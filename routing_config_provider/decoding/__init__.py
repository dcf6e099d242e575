"""Fragment decoding: YAML documents and Jinja2-templated YAML documents."""

from .yaml_decoder import decode_fragment, STRUCTURED_EXTENSIONS
from .templates import render_template, TEMPLATE_EXTENSION, default_template_functions

__all__ = [
    'decode_fragment',
    'render_template',
    'default_template_functions',
    'STRUCTURED_EXTENSIONS',
    'TEMPLATE_EXTENSION',
]
