"""Configuration file loading for harbordns.

Brief:
  This module contains the configuration-parsing utilities used by the CLI
  entrypoint. It centralizes:
    - reading YAML config files
    - merging variables from config/env/CLI
    - validation into a HarborConfig model

Inputs:
  - YAML config paths and CLI variable assignments

Outputs:
  - HarborConfig instances
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import yaml

from .config_schema import HarborConfig, validate_config


def _is_var_key(key: str) -> bool:
    """Brief: Validate whether a string is a supported variable key name.

    Inputs:
      - key: Candidate variable name.

    Outputs:
      - bool: True when the name is ALL_UPPERCASE and matches [A-Z_][A-Z0-9_]*.
    """

    if not key:
        return False
    if key != key.upper():
        return False

    import re as _re

    return bool(_re.fullmatch(r"[A-Z_][A-Z0-9_]*", key))


def _parse_yaml_value(text: str) -> Any:
    """Brief: Parse a CLI/environment variable value as YAML.

    Inputs:
      - text: String containing YAML scalar/list/dict.

    Outputs:
      - Any: Parsed value (falls back to original string on parse errors).
    """

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return text


def parse_config_variables(
    cfg: Dict[str, Any],
    *,
    cli_vars: Optional[List[str]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Brief: Merge config/environment/CLI variables into cfg['vars'].

    Inputs:
      - cfg: Parsed YAML configuration mapping (mutated in-place).
      - cli_vars: Optional list of CLI `KEY=YAML` assignments.
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - dict: The merged variables mapping stored back onto cfg['vars'].

    Precedence:
      - CLI (-v/--var) overrides environment overrides config-file variables.

    Notes:
      - Environment variables are only merged for keys already declared in the
        config file's `vars`, so unrelated process environment does not leak
        into the configuration.
      - Values are parsed as YAML so list/dict/int/bool values can be provided.

    Example:
      >>> cfg = {'vars': {'INTERVAL': 60}}
      >>> parse_config_variables(cfg, cli_vars=['INTERVAL=5'], environ={})['INTERVAL']
      5
    """

    base = cfg.get("vars")
    if base is None:
        merged: Dict[str, Any] = {}
    elif isinstance(base, dict):
        merged = dict(base)
    else:
        raise ValueError("config.vars must be a mapping when present")

    env = os.environ if environ is None else environ
    for k in list(merged.keys()):
        if _is_var_key(k) and k in env:
            merged[k] = _parse_yaml_value(str(env[k]))

    for assignment in cli_vars or []:
        if "=" not in assignment:
            raise ValueError(
                "Invalid -v/--var value (expected KEY=YAML), got: %r" % assignment
            )
        k, raw = assignment.split("=", 1)
        k = str(k).strip()
        if not _is_var_key(k):
            raise ValueError(
                "Invalid variable name %r (must be ALL_UPPERCASE and match [A-Z_][A-Z0-9_]*)"
                % k
            )
        merged[k] = _parse_yaml_value(raw)

    cfg["vars"] = merged
    return merged


def parse_config_file(
    config_path: str,
    *,
    cli_vars: Optional[List[str]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> HarborConfig:
    """Brief: Read, variable-merge, and validate a YAML config file.

    Inputs:
      - config_path: Path to the YAML configuration file.
      - cli_vars: Optional list of CLI `KEY=YAML` assignments (from -v/--var).
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - HarborConfig: validated configuration.

    Raises:
      - OSError: when the file cannot be read.
      - ValueError: when the YAML is malformed, validation fails, or variables
        are invalid.
    """

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            cfg = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Failed to parse {config_path}: {exc}") from exc

    if not isinstance(cfg, dict):
        raise ValueError("Configuration root must be a mapping")

    parse_config_variables(cfg, cli_vars=list(cli_vars or []), environ=environ)
    return validate_config(cfg, config_path=config_path)
