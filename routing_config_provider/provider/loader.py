"""Loading of a single configuration file into a Fragment."""

import itertools
import logging
from typing import Any, Callable, Dict, Optional

from ..decoding import decode_fragment, render_template
from ..errors import ConfigIOError
from ..types import Fragment

logger = logging.getLogger(__name__)

Decoder = Callable[[str, Optional[str]], Optional[Fragment]]
TemplateRenderer = Callable[[str, Optional[Dict[str, Callable[..., Any]]], Optional[str]], str]


def read_file(filename: str) -> str:
    """Read a configuration file as text.

    Raises:
        ConfigIOError: If the name is empty or the file is unreadable
    """
    if not filename:
        raise ConfigIOError(f"Invalid filename: {filename!r}", path=filename)
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigIOError(
            f"Error reading configuration file: {filename} - {e}",
            path=filename
        ) from e


class ConfigLoader:
    """Reads one file and decodes it, optionally expanding it as a template.

    Every TLS object leaving the loader carries a surrogate identity. An
    object the decoder hands out twice keeps the identity it got first, so
    the merger treats the repeats as one entry.
    """

    def __init__(self, decoder: Decoder = decode_fragment,
                 renderer: TemplateRenderer = render_template,
                 template_functions: Optional[Dict[str, Callable[..., Any]]] = None):
        self.decoder = decoder
        self.renderer = renderer
        self.template_functions = template_functions or {}
        self._identities = itertools.count(1)

    def load(self, filename: str, templated: bool) -> Fragment:
        """Load ``filename`` into a Fragment with non-None containers.

        Args:
            filename: Path of the file to load
            templated: Expand the content as a template before decoding

        Raises:
            ConfigIOError: If the file cannot be read
            ConfigParseError: If expansion or decoding fails
        """
        content = read_file(filename)

        if templated:
            content = self.renderer(content, self.template_functions, filename)
        fragment = self.decoder(content, filename)

        if fragment is None or fragment.is_blank():
            logger.debug(f"No configuration found in {filename}")
            return Fragment.empty()

        if fragment.backends is None:
            fragment.backends = {}
        if fragment.frontends is None:
            fragment.frontends = {}
        if fragment.tls is None:
            fragment.tls = []

        for tls in fragment.tls:
            if tls.identity is None:
                tls.identity = next(self._identities)

        return fragment
