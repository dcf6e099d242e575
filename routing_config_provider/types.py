"""Routing configuration data model.

Fragments are produced per source file by the loader and folded into a
Configuration snapshot by the merger. A published Configuration is owned by
its consumer and never touched again by the provider.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Server:
    """One upstream target of a backend."""
    url: str
    weight: int = 1


@dataclass
class LoadBalancer:
    method: str = "wrr"
    sticky: bool = False


@dataclass
class HealthCheck:
    path: str
    interval: Optional[str] = None


@dataclass
class Backend:
    """Named pool of upstream servers traffic can be routed to."""
    servers: Dict[str, Server] = field(default_factory=dict)
    load_balancer: Optional[LoadBalancer] = None
    health_check: Optional[HealthCheck] = None


@dataclass
class Route:
    rule: str


@dataclass
class Frontend:
    """Named routing rule selecting a backend for matching traffic."""
    backend: str
    entry_points: List[str] = field(default_factory=list)
    routes: Dict[str, Route] = field(default_factory=dict)
    pass_host_header: bool = True
    priority: int = 0


@dataclass
class Certificate:
    cert_file: str
    key_file: str


@dataclass(eq=False)
class TLSConfiguration:
    """Certificate material for terminating TLS on some entry points.

    Two objects are the same entry only when they share ``identity``, a
    surrogate token handed out by the loader when the object is first seen.
    Structurally equal blocks from different fragments stay distinct.
    """
    certificate: Certificate
    entry_points: List[str] = field(default_factory=list)
    identity: Optional[int] = None

    def __eq__(self, other):
        if not isinstance(other, TLSConfiguration):
            return NotImplemented
        if self.identity is None or other.identity is None:
            return self is other
        return self.identity == other.identity

    def __hash__(self):
        return hash(self.identity) if self.identity is not None else id(self)


@dataclass
class Fragment:
    """Decoded content of one source file.

    A decoder may leave any container as None; ConfigLoader normalizes the
    result before anyone else sees it.
    """
    backends: Optional[Dict[str, Backend]] = None
    frontends: Optional[Dict[str, Frontend]] = None
    tls: Optional[List[TLSConfiguration]] = None

    def is_blank(self) -> bool:
        """True when the decoder produced none of the three containers."""
        return self.backends is None and self.frontends is None and self.tls is None

    @classmethod
    def empty(cls) -> 'Fragment':
        return cls(backends={}, frontends={}, tls=[])


@dataclass
class Configuration:
    """Aggregate snapshot of every fragment under the watch target."""
    backends: Dict[str, Backend] = field(default_factory=dict)
    frontends: Dict[str, Frontend] = field(default_factory=dict)
    tls: List[TLSConfiguration] = field(default_factory=list)

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> 'Configuration':
        return cls(
            backends=fragment.backends if fragment.backends is not None else {},
            frontends=fragment.frontends if fragment.frontends is not None else {},
            tls=list(fragment.tls) if fragment.tls is not None else [],
        )

    def summary(self) -> Dict[str, int]:
        return {
            'backends': len(self.backends),
            'frontends': len(self.frontends),
            'tls': len(self.tls),
        }


@dataclass(frozen=True)
class ConfigMessage:
    """Snapshot envelope published to the control plane."""
    provider_name: str
    configuration: Configuration
