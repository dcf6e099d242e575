"""Unit tests for YAML fragment decoding and template expansion."""

import pytest

from routing_config_provider.decoding import decode_fragment, render_template
from routing_config_provider.errors import ConfigParseError


FULL_FRAGMENT = """
backends:
  web:
    servers:
      s1: {url: "http://10.0.0.1:80", weight: 2}
      s2: {url: "http://10.0.0.2:80"}
    load_balancer: {method: drr, sticky: true}
    health_check: {path: /health, interval: 10s}
frontends:
  web:
    backend: web
    entry_points: [http, https]
    routes:
      host: {rule: "Host:example.com"}
    pass_host_header: false
    priority: 10
tls:
  - entry_points: [https]
    certificate: {cert_file: /certs/site.pem, key_file: /certs/site.key}
"""


class TestDecodeFragment:

    def test_full_fragment(self):
        fragment = decode_fragment(FULL_FRAGMENT, "full.yaml")

        backend = fragment.backends["web"]
        assert backend.servers["s1"].url == "http://10.0.0.1:80"
        assert backend.servers["s1"].weight == 2
        assert backend.servers["s2"].weight == 1
        assert backend.load_balancer.method == "drr"
        assert backend.load_balancer.sticky is True
        assert backend.health_check.path == "/health"
        assert backend.health_check.interval == "10s"

        frontend = fragment.frontends["web"]
        assert frontend.backend == "web"
        assert frontend.entry_points == ["http", "https"]
        assert frontend.routes["host"].rule == "Host:example.com"
        assert frontend.pass_host_header is False
        assert frontend.priority == 10

        assert len(fragment.tls) == 1
        assert fragment.tls[0].certificate.cert_file == "/certs/site.pem"
        assert fragment.tls[0].entry_points == ["https"]
        assert fragment.tls[0].identity is None

    def test_empty_document_is_none(self):
        assert decode_fragment("", "empty.yaml") is None
        assert decode_fragment("# only a comment\n", "empty.yaml") is None

    def test_absent_sections_stay_none(self):
        fragment = decode_fragment("backends:\n  web: {}\n", "partial.yaml")

        assert list(fragment.backends) == ["web"]
        assert fragment.frontends is None
        assert fragment.tls is None

    def test_frontend_defaults(self):
        fragment = decode_fragment("frontends:\n  web: {backend: web}\n")

        frontend = fragment.frontends["web"]
        assert frontend.pass_host_header is True
        assert frontend.priority == 0
        assert frontend.entry_points == []
        assert frontend.routes == {}

    def test_syntax_error(self):
        with pytest.raises(ConfigParseError) as exc_info:
            decode_fragment("backends: [unclosed\n", "broken.yaml")

        assert "Invalid YAML syntax in broken.yaml" in exc_info.value.message
        assert exc_info.value.path == "broken.yaml"

    def test_non_mapping_document(self):
        with pytest.raises(ConfigParseError) as exc_info:
            decode_fragment("- a\n- b\n", "list.yaml")

        assert "must be a dictionary" in exc_info.value.message

    @pytest.mark.parametrize("text,field_path", [
        ("backends: [web]\n", "backends"),
        ("backends:\n  web:\n    servers:\n      s1: {weight: 1}\n", "backends.web.servers.s1.url"),
        ("backends:\n  web:\n    servers:\n      s1: {url: x, weight: heavy}\n", "backends.web.servers.s1.weight"),
        ("frontends:\n  web: {entry_points: [http]}\n", "frontends.web.backend"),
        ("frontends:\n  web: {backend: web, priority: true}\n", "frontends.web.priority"),
        ("tls: {cert_file: a}\n", "tls"),
        ("tls:\n  - certificate: {cert_file: a.pem}\n", "tls[0].certificate.key_file"),
    ])
    def test_shape_errors_name_the_field(self, text, field_path):
        with pytest.raises(ConfigParseError) as exc_info:
            decode_fragment(text, "bad.yaml")

        assert exc_info.value.field_path == field_path
        assert "bad.yaml" in exc_info.value.message


class TestRenderTemplate:

    def test_functions_are_available(self):
        rendered = render_template("name: {{ upper('web') }}", {'upper': str.upper}, "a.tmpl")

        assert rendered == "name: WEB"

    def test_env_helper(self, monkeypatch):
        monkeypatch.setenv("BACKEND_HOST", "10.1.1.1")

        assert render_template("{{ env('BACKEND_HOST') }}") == "10.1.1.1"
        assert render_template("{{ env('UNSET_VARIABLE_FOR_TEST', 'fallback') }}") == "fallback"

    def test_plain_yaml_is_unchanged(self):
        text = "backends:\n  web: {}\n"

        assert render_template(text, {}) == text

    def test_undefined_name_raises(self):
        with pytest.raises(ConfigParseError) as exc_info:
            render_template("{{ missing }}", {}, "a.tmpl")

        assert "Unable to expand template a.tmpl" in exc_info.value.message

    def test_syntax_error_raises(self):
        with pytest.raises(ConfigParseError):
            render_template("{% for %}", {}, "a.tmpl")

    def test_failing_function_raises_parse_error(self):
        def lookup():
            raise ValueError("lookup failed")

        with pytest.raises(ConfigParseError) as exc_info:
            render_template("name: {{ lookup() }}", {'lookup': lookup}, "a.tmpl")

        assert "Unable to expand template a.tmpl" in exc_info.value.message
        assert "lookup failed" in exc_info.value.message
        assert exc_info.value.path == "a.tmpl"
