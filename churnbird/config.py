"""Configuration models using Pydantic for validation."""
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import copy
import os
import re
import time

from churnbird.cardinality import DEFAULT_FIXED_LABEL_CARDINALITY, DEFAULT_FIXED_LABEL_NAME

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def parse_duration(value: Any) -> float:
    """
    Parse a duration into seconds.

    Accepts plain numbers (seconds) and Go-style strings such as
    "15s", "1m30s", "500ms" or "2h".
    """
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" into its parts; an empty host means all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port, got {address!r}")
    if not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"Invalid port in listen address {address!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, int(port)


class PopulationConfig(BaseModel):
    """Size and shape of the generated population."""
    num_families: int = Field(ge=0)
    max_series_per_family: int = Field(ge=1)
    fixed_label_name: str = DEFAULT_FIXED_LABEL_NAME
    fixed_label_cardinality: int = Field(default=DEFAULT_FIXED_LABEL_CARDINALITY, ge=1, le=26)

    @field_validator('fixed_label_name')
    @classmethod
    def validate_fixed_label_name(cls, v):
        if not _LABEL_NAME.match(v):
            raise ValueError(f"Invalid label name: {v!r}")
        return v


class TurnoverConfig(BaseModel):
    """Series churn settings."""
    rate: int = Field(default=6, ge=0)  # 0 disables turnover
    interval_s: float = Field(default=15.0, gt=0)

    @field_validator('interval_s', mode='before')
    @classmethod
    def validate_interval(cls, v):
        return parse_duration(v)

    @property
    def enabled(self) -> bool:
        return self.rate > 0


class PrometheusExporterConfig(BaseModel):
    """Prometheus pull exporter configuration."""
    listen_address: str = ":8080"

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v):
        parse_listen_address(v)
        return v

    @property
    def bind_address(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return parse_listen_address(self.listen_address)[1]


class ControlAPIConfig(BaseModel):
    """Control API configuration."""
    enabled: bool = True
    port: int = Field(default=8081, ge=0, le=65535)
    bind_address: str = "0.0.0.0"


class ExportersConfig(BaseModel):
    """Configuration for all servers."""
    prometheus: PrometheusExporterConfig = Field(default_factory=PrometheusExporterConfig)
    control_api: ControlAPIConfig = Field(default_factory=ControlAPIConfig)


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    seed: int = Field(default_factory=time.time_ns)
    log_level: str = "INFO"


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    population: PopulationConfig
    turnover: TurnoverConfig = Field(default_factory=TurnoverConfig)
    exporters: ExportersConfig = Field(default_factory=ExportersConfig)


# Environment variable -> (section, key) in the raw config
ENV_OVERRIDES = {
    "LISTEN_ADDRESS": ("exporters.prometheus", "listen_address"),
    "RANDOM_SEED": ("global", "seed"),
    "TURNOVER_RATE": ("turnover", "rate"),
    "TURNOVER_INTERVAL": ("turnover", "interval_s"),
    "LOG_LEVEL": ("global", "log_level"),
}


def set_path(raw: Dict[str, Any], section: str, key: str, value: Any):
    """Set raw[section...][key], creating intermediate sections."""
    node = raw
    for part in section.split("."):
        node = node.setdefault(part, {})
    node[key] = value


def apply_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to a raw config dict."""
    for env_name, (section, key) in ENV_OVERRIDES.items():
        if (env_value := os.getenv(env_name)) is not None:
            set_path(raw, section, key, env_value)
    return raw


def read_config_file(config_path: str) -> Dict[str, Any]:
    """Read a raw config dict from a YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f)

    return raw_config or {}


def build_config(
    raw_config: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[Tuple[str, str], Any]] = None
) -> Config:
    """
    Validate a raw config dict after layering env and explicit overrides.

    Precedence (lowest to highest): raw_config, environment, overrides.
    """
    raw = apply_env_overrides(copy.deepcopy(raw_config or {}))
    for (section, key), value in (overrides or {}).items():
        if value is not None:
            set_path(raw, section, key, value)

    try:
        return Config(**raw)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}")


def load_config(config_path: str, overrides: Optional[Dict[Tuple[str, str], Any]] = None) -> Config:
    """Load and validate configuration from YAML file."""
    return build_config(read_config_file(config_path), overrides)
