"""
Client configuration.

Configuration can be built directly, from the standard CONSUL_* environment
variables, or from a YAML settings file:

```yaml
consul:
  address: "consul.service.internal:8501"
  scheme: https
  datacenter: dc1
  token: "..."
  timeout: 10
  tls:
    ca_file: /etc/consul/ca.pem
    insecure_skip_verify: false
  retry:
    max_retries: 5
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError
from .transport.resilience import RetryConfig

DEFAULT_ADDRESS = "127.0.0.1:8500"
DEFAULT_SCHEME = "http"
DEFAULT_TIMEOUT = 30.0  # seconds

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(name, f"expected a boolean, got {raw!r}")


def _parse_float(name: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(name, f"expected a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(name, "must be positive")
    return value


@dataclass
class TLSConfig:
    """TLS settings for HTTPS connections.

    Attributes:
        ca_file: CA bundle used to verify the server certificate
        cert_file: Client certificate for mutual TLS
        key_file: Private key for cert_file
        insecure_skip_verify: Disable server certificate verification
    """

    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    insecure_skip_verify: bool = False

    def __post_init__(self) -> None:
        if self.key_file and not self.cert_file:
            raise ConfigurationError("tls.key_file", "requires tls.cert_file")


@dataclass
class ClientConfig:
    """Configuration for talking to a Consul agent.

    Attributes:
        address: host:port of the agent HTTP API
        scheme: "http" or "https"
        datacenter: Default datacenter for requests (agent's own if None)
        namespace: Default namespace for requests (Enterprise only)
        token: Default ACL token
        timeout: Total per-request timeout in seconds
        tls: TLS settings
        retry: Retry settings for transient transport failures
    """

    address: str = DEFAULT_ADDRESS
    scheme: str = DEFAULT_SCHEME
    datacenter: str | None = None
    namespace: str | None = None
    token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    tls: TLSConfig = field(default_factory=TLSConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        if self.scheme not in ("http", "https"):
            raise ConfigurationError("scheme", f"expected 'http' or 'https', got {self.scheme!r}")
        if not self.address:
            raise ConfigurationError("address", "must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError("timeout", "must be positive")

    @property
    def base_url(self) -> str:
        """Root URL of the agent HTTP API."""
        return f"{self.scheme}://{self.address}"

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Create config from environment variables.

        Recognized environment variables:
        - CONSUL_HTTP_ADDR: host:port, optionally prefixed with http:// or https://
        - CONSUL_HTTP_TOKEN: ACL token
        - CONSUL_HTTP_SSL: use https when true
        - CONSUL_HTTP_SSL_VERIFY: verify server certificates (default true)
        - CONSUL_CACERT, CONSUL_CLIENT_CERT, CONSUL_CLIENT_KEY: TLS files
        - CONSUL_DATACENTER, CONSUL_NAMESPACE: request defaults
        - CONSUL_HTTP_TIMEOUT: per-request timeout in seconds

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        address = os.environ.get("CONSUL_HTTP_ADDR", DEFAULT_ADDRESS)
        scheme = DEFAULT_SCHEME

        if "://" in address:
            scheme, address = address.split("://", 1)
        if "CONSUL_HTTP_SSL" in os.environ:
            if _parse_bool("CONSUL_HTTP_SSL", os.environ["CONSUL_HTTP_SSL"]):
                scheme = "https"

        verify = True
        if "CONSUL_HTTP_SSL_VERIFY" in os.environ:
            verify = _parse_bool("CONSUL_HTTP_SSL_VERIFY", os.environ["CONSUL_HTTP_SSL_VERIFY"])

        timeout = DEFAULT_TIMEOUT
        if os.environ.get("CONSUL_HTTP_TIMEOUT"):
            timeout = _parse_float("CONSUL_HTTP_TIMEOUT", os.environ["CONSUL_HTTP_TIMEOUT"])

        tls = TLSConfig(
            ca_file=os.environ.get("CONSUL_CACERT") or None,
            cert_file=os.environ.get("CONSUL_CLIENT_CERT") or None,
            key_file=os.environ.get("CONSUL_CLIENT_KEY") or None,
            insecure_skip_verify=not verify,
        )

        return cls(
            address=address,
            scheme=scheme,
            datacenter=os.environ.get("CONSUL_DATACENTER") or None,
            namespace=os.environ.get("CONSUL_NAMESPACE") or None,
            token=os.environ.get("CONSUL_HTTP_TOKEN") or None,
            timeout=timeout,
            tls=tls,
        )

    @classmethod
    def from_file(cls, path: Path | str) -> ClientConfig:
        """Load config from the ``consul`` section of a YAML file.

        A missing file or section yields the defaults.

        Raises:
            ConfigurationError: If the file is not valid YAML or holds invalid values
        """
        config_path = Path(path)
        if not config_path.exists():
            return cls()

        try:
            content = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(str(config_path), f"invalid YAML: {e}") from e

        if not isinstance(content, dict):
            raise ConfigurationError(str(config_path), "expected a mapping at top level")

        section = content.get("consul") or {}
        if not isinstance(section, dict):
            raise ConfigurationError("consul", "expected a mapping")

        return cls.from_dict(section)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Build config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(", ".join(sorted(unknown)), "unknown configuration key")

        values = dict(data)
        if "timeout" in values:
            values["timeout"] = _parse_float("timeout", values["timeout"])
        values["tls"] = _sub_config(TLSConfig, "tls", values.get("tls"))
        values["retry"] = _sub_config(RetryConfig, "retry", values.get("retry"))
        return cls(**values)


def _sub_config(config_cls: type, name: str, data: Any) -> Any:
    if data is None:
        return config_cls()
    if not isinstance(data, dict):
        raise ConfigurationError(name, "expected a mapping")
    allowed = {f.name for f in fields(config_cls)} - {"retryable_exceptions"}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigurationError(
            ", ".join(f"{name}.{key}" for key in sorted(unknown)), "unknown configuration key"
        )
    return config_cls(**data)
