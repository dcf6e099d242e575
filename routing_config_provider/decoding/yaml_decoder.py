"""Decode one YAML fragment into routing objects.

Expected layout::

    backends:
      web:
        servers:
          s1: {url: "http://10.0.0.1:80", weight: 2}
        load_balancer: {method: drr, sticky: false}
    frontends:
      web:
        backend: web
        entry_points: [http]
        routes:
          host: {rule: "Host:example.com"}
    tls:
      - entry_points: [https]
        certificate: {cert_file: cert.pem, key_file: key.pem}
"""

from typing import Any, Dict, List, Optional

import yaml

from ..errors import ConfigParseError
from ..types import (
    Backend,
    Certificate,
    Fragment,
    Frontend,
    HealthCheck,
    LoadBalancer,
    Route,
    Server,
    TLSConfiguration,
)

STRUCTURED_EXTENSIONS = (".yaml", ".yml")


class _FragmentDecoder:
    """Walks a loaded YAML document, reporting errors with file and field."""

    def __init__(self, source: Optional[str]):
        self.source = source or '<string>'
        # YAML aliases reuse one mapping; keep them one TLS object.
        self._tls_by_node: Dict[int, TLSConfiguration] = {}

    def fail(self, message: str, field_path: str) -> ConfigParseError:
        return ConfigParseError(
            f"{message} in {self.source} (field '{field_path}')",
            path=self.source,
            field_path=field_path
        )

    def mapping(self, value: Any, field_path: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise self.fail(f"Expected a mapping, got {type(value).__name__}", field_path)
        return value

    def string(self, value: Any, field_path: str) -> str:
        if not isinstance(value, str):
            raise self.fail(f"Expected a string, got {type(value).__name__}", field_path)
        return value

    def string_list(self, value: Any, field_path: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise self.fail(f"Expected a list, got {type(value).__name__}", field_path)
        return [self.string(item, f"{field_path}[{i}]") for i, item in enumerate(value)]

    def integer(self, value: Any, field_path: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise self.fail(f"Expected an integer, got {type(value).__name__}", field_path)
        return value

    def boolean(self, value: Any, field_path: str) -> bool:
        if not isinstance(value, bool):
            raise self.fail(f"Expected a boolean, got {type(value).__name__}", field_path)
        return value

    def backend(self, data: Any, field_path: str) -> Backend:
        data = self.mapping(data, field_path)
        servers = {}
        for name, server in self.mapping(data.get('servers'), f"{field_path}.servers").items():
            server_path = f"{field_path}.servers.{name}"
            server = self.mapping(server, server_path)
            if 'url' not in server:
                raise self.fail("Missing server url", f"{server_path}.url")
            servers[str(name)] = Server(
                url=self.string(server['url'], f"{server_path}.url"),
                weight=self.integer(server.get('weight', 1), f"{server_path}.weight")
            )

        load_balancer = None
        if data.get('load_balancer') is not None:
            lb = self.mapping(data['load_balancer'], f"{field_path}.load_balancer")
            load_balancer = LoadBalancer(
                method=self.string(lb.get('method', 'wrr'), f"{field_path}.load_balancer.method"),
                sticky=self.boolean(lb.get('sticky', False), f"{field_path}.load_balancer.sticky")
            )

        health_check = None
        if data.get('health_check') is not None:
            hc = self.mapping(data['health_check'], f"{field_path}.health_check")
            interval = hc.get('interval')
            health_check = HealthCheck(
                path=self.string(hc.get('path'), f"{field_path}.health_check.path"),
                interval=None if interval is None else str(interval)
            )

        return Backend(servers=servers, load_balancer=load_balancer, health_check=health_check)

    def frontend(self, data: Any, field_path: str) -> Frontend:
        data = self.mapping(data, field_path)
        if 'backend' not in data:
            raise self.fail("Missing frontend backend", f"{field_path}.backend")

        routes = {}
        for name, route in self.mapping(data.get('routes'), f"{field_path}.routes").items():
            route_path = f"{field_path}.routes.{name}"
            route = self.mapping(route, route_path)
            routes[str(name)] = Route(rule=self.string(route.get('rule'), f"{route_path}.rule"))

        return Frontend(
            backend=self.string(data['backend'], f"{field_path}.backend"),
            entry_points=self.string_list(data.get('entry_points'), f"{field_path}.entry_points"),
            routes=routes,
            pass_host_header=self.boolean(data.get('pass_host_header', True), f"{field_path}.pass_host_header"),
            priority=self.integer(data.get('priority', 0), f"{field_path}.priority")
        )

    def tls(self, data: Any, field_path: str) -> TLSConfiguration:
        if id(data) in self._tls_by_node:
            return self._tls_by_node[id(data)]

        node = self.mapping(data, field_path)
        certificate = self.mapping(node.get('certificate'), f"{field_path}.certificate")
        tls = TLSConfiguration(
            certificate=Certificate(
                cert_file=self.string(certificate.get('cert_file'), f"{field_path}.certificate.cert_file"),
                key_file=self.string(certificate.get('key_file'), f"{field_path}.certificate.key_file")
            ),
            entry_points=self.string_list(node.get('entry_points'), f"{field_path}.entry_points")
        )
        self._tls_by_node[id(data)] = tls
        return tls

    def fragment(self, document: Dict[str, Any]) -> Fragment:
        fragment = Fragment()

        if document.get('backends') is not None:
            fragment.backends = {
                str(name): self.backend(value, f"backends.{name}")
                for name, value in self.mapping(document['backends'], 'backends').items()
            }

        if document.get('frontends') is not None:
            fragment.frontends = {
                str(name): self.frontend(value, f"frontends.{name}")
                for name, value in self.mapping(document['frontends'], 'frontends').items()
            }

        if document.get('tls') is not None:
            entries = document['tls']
            if not isinstance(entries, list):
                raise self.fail(f"Expected a list, got {type(entries).__name__}", 'tls')
            fragment.tls = [self.tls(entry, f"tls[{i}]") for i, entry in enumerate(entries)]

        return fragment


def decode_fragment(text: str, source: Optional[str] = None) -> Optional[Fragment]:
    """Decode YAML ``text`` into a Fragment.

    Returns None for an empty document. Absent top-level sections stay None.

    Raises:
        ConfigParseError: On YAML syntax errors or unexpected shapes
    """
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParseError(
            f"Invalid YAML syntax in {source or '<string>'}: {e}",
            path=source
        ) from e

    if document is None:
        return None

    decoder = _FragmentDecoder(source)
    if not isinstance(document, dict):
        raise decoder.fail(f"Configuration must be a dictionary, got {type(document).__name__}", '<root>')

    return decoder.fragment(document)
