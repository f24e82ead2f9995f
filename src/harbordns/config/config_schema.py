"""Typed configuration models and variable expansion for harbordns.

Brief:
  - HarborConfig (pydantic) describes the whole YAML file: logging, the
    Docker source, and output formatting.
  - expand_variables applies `vars` substitution before validation.
"""

from __future__ import annotations

import copy
import json
import re
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, ValidationError, validator

_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")
_VAR_KEY = re.compile(r"[A-Z_][A-Z0-9_]*")

_CLUSTER_MODES = {
    "auto": "auto",
    "on": "on",
    "true": "on",
    "yes": "on",
    "off": "off",
    "false": "off",
    "no": "off",
}


class LoggingConfig(BaseModel):
    """Brief: Logging options passed to init_logging().

    Inputs:
      - level: debug|info|warn|error|crit.
      - stderr: Log to stderr.
      - file: Optional log file path.
      - syslog: False, True, or a mapping with address/facility/tag.
    """

    level: str = Field(default="info")
    stderr: bool = True
    file: Optional[str] = None
    syslog: Union[bool, Dict[str, Any]] = False

    class Config:
        extra = "forbid"

    @validator("level", pre=True)
    def _normalize_level(cls, v):  # type: ignore[no-untyped-def]
        s = str(v or "info").strip().lower()
        if s not in {"debug", "info", "warn", "warning", "error", "crit", "critical"}:
            raise ValueError(f"unsupported log level {v!r}")
        return s


class SourceConfig(BaseModel):
    """Brief: Docker engine source options.

    Inputs:
      - url: Docker endpoint URL; None means configure from the environment
        (DOCKER_HOST, DOCKER_TLS_VERIFY, DOCKER_CERT_PATH).
      - cluster_mode: "auto" (detect swarm manager), "on" or "off".
      - interval_second: Seconds between resolution cycles (0 = run once).
      - timeout_second: Optional Docker API timeout.
      - watch_events: Also re-resolve on container lifecycle events.
    """

    url: Optional[str] = None
    cluster_mode: str = Field(default="auto")
    interval_second: float = Field(default=60.0, ge=0)
    timeout_second: Optional[float] = Field(default=None, gt=0)
    watch_events: bool = False

    class Config:
        extra = "forbid"

    @validator("cluster_mode", pre=True)
    def _normalize_cluster_mode(cls, v):  # type: ignore[no-untyped-def]
        if isinstance(v, bool):
            return "on" if v else "off"
        key = str(v if v is not None else "auto").strip().lower()
        if key not in _CLUSTER_MODES:
            raise ValueError(f"cluster_mode must be auto, on or off, got {v!r}")
        return _CLUSTER_MODES[key]

    @property
    def cluster_mode_flag(self) -> Optional[bool]:
        """Return None for auto-detection, otherwise the forced setting."""
        if self.cluster_mode == "auto":
            return None
        return self.cluster_mode == "on"


class OutputConfig(BaseModel):
    """Brief: How resolved endpoints are written to stdout ("json" or "yaml")."""

    format: str = Field(default="json")

    class Config:
        extra = "forbid"

    @validator("format", pre=True)
    def _normalize_format(cls, v):  # type: ignore[no-untyped-def]
        s = str(v or "json").strip().lower()
        if s not in {"json", "yaml"}:
            raise ValueError(f"output format must be json or yaml, got {v!r}")
        return s


class HarborConfig(BaseModel):
    """Top-level configuration file model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    class Config:
        extra = "forbid"


def expand_variables(cfg: Dict[str, Any]) -> None:
    """Brief: Expand top-level `vars` into the config and remove the group.

    Inputs:
      - cfg: Parsed YAML configuration mapping (mutated in-place).

    Outputs:
      - None.

    Behavior:
      - Replaces `${KEY}` occurrences inside strings.
      - A string that is exactly `$KEY` or `${KEY}` is replaced with the
        variable's YAML value (list/dict/int/etc.).
      - Keys are never substituted; the `vars` group is removed afterwards.

    Raises:
      - ValueError: for non-mapping vars, badly named keys, or cycles.

    Example:
      >>> cfg = {"vars": {"URL": "tcp://docker:2375"}, "source": {"url": "${URL}"}}
      >>> expand_variables(cfg)
      >>> cfg
      {'source': {'url': 'tcp://docker:2375'}}
    """

    variables = cfg.get("vars")
    if variables is None:
        cfg.pop("vars", None)
        return
    if not isinstance(variables, dict):
        raise ValueError("config.vars must be a mapping when present")

    for k in variables.keys():
        if not isinstance(k, str) or not _VAR_KEY.fullmatch(k):
            raise ValueError(f"config.vars key {k!r} must match [A-Z_][A-Z0-9_]*")

    resolved: Dict[str, Any] = {}

    def _resolve_var(key: str, stack: list[str]) -> Any:
        if key in resolved:
            return resolved[key]
        if key in stack:
            cycle = " -> ".join(stack + [key])
            raise ValueError(f"config.vars contains a cycle: {cycle}")
        if key not in variables:
            raise KeyError(key)

        stack.append(key)
        value = _expand_obj(variables[key], stack)
        stack.pop()

        resolved[key] = value
        return value

    def _injection_var_name(text: str) -> Optional[str]:
        if text.startswith("${") and text.endswith("}") and text[2:-1] in variables:
            return text[2:-1]
        if text.startswith("$") and text[1:] in variables:
            return text[1:]
        return None

    def _expand_string(text: str, stack: list[str]) -> Any:
        whole = _injection_var_name(text)
        if whole is not None:
            return copy.deepcopy(_resolve_var(whole, stack))

        def _repl(match: re.Match[str]) -> str:
            try:
                v = _resolve_var(match.group(1), stack)
            except KeyError:
                return match.group(0)
            if isinstance(v, bool):
                return "true" if v else "false"
            if v is None:
                return "null"
            if isinstance(v, (int, float, str)):
                return str(v)
            return json.dumps(v)

        return _VAR_PATTERN.sub(_repl, text)

    def _expand_obj(obj: Any, stack: list[str]) -> Any:
        if isinstance(obj, str):
            return _expand_string(obj, stack)
        if isinstance(obj, list):
            return [_expand_obj(item, stack) for item in obj]
        if isinstance(obj, dict):
            return {k: _expand_obj(v, stack) for k, v in obj.items()}
        return obj

    # Resolve all variables first so cycles surface even when unused.
    for k in list(variables.keys()):
        _resolve_var(k, [])

    for top_key in list(cfg.keys()):
        if top_key == "vars":
            continue
        cfg[top_key] = _expand_obj(cfg[top_key], [])

    cfg.pop("vars", None)


def validate_config(
    cfg: Dict[str, Any], *, config_path: Optional[str] = None
) -> HarborConfig:
    """Brief: Expand variables and validate a parsed configuration mapping.

    Inputs:
      - cfg: Dict loaded from YAML (mutated by variable expansion).
      - config_path: Optional path used only in error messages.

    Outputs:
      - HarborConfig.

    Raises:
      - ValueError: when variables or fields are invalid.
    """

    expand_variables(cfg)
    try:
        # Empty YAML sections ("source:") fall back to their defaults.
        return HarborConfig(**{k: v for k, v in cfg.items() if v is not None})
    except ValidationError as exc:
        where = f" in {config_path}" if config_path else ""
        raise ValueError(f"Invalid configuration{where}: {exc}") from exc
