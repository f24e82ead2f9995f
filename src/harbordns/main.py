from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from typing import List, Optional, TextIO

import yaml

from .config.config_parser import parse_config_file
from .config.logging_config import init_logging
from .endpoint import Endpoint
from .source import DOCKER_ERRORS, ContainerListError, DockerEngineSource

logger = logging.getLogger("harbordns.main")


def render_endpoints(endpoints: List[Endpoint], fmt: str = "json") -> str:
    """
    Brief: Render one cycle's endpoints for stdout.

    Inputs:
      - endpoints: Resolved Endpoint list.
      - fmt: "json" (one JSON object per line) or "yaml" (one document).

    Outputs:
      - str: Rendered text ending in a newline ("" for no endpoints in json).
    """
    records = [ep.to_dict() for ep in endpoints]
    if fmt == "yaml":
        return yaml.safe_dump(records, sort_keys=False, explicit_start=True)
    return "".join(json.dumps(rec) + "\n" for rec in records)


def run_cycle(source: DockerEngineSource, fmt: str, out: TextIO) -> bool:
    """
    Brief: Resolve endpoints once and write them to out.

    Inputs:
      - source: DockerEngineSource.
      - fmt: Output format ("json" or "yaml").
      - out: Writable text stream.

    Outputs:
      - bool: False when containers could not be listed (the error is logged).
    """
    try:
        endpoints = source.endpoints()
    except ContainerListError as exc:
        logger.error("%s", exc)
        return False
    out.write(render_endpoints(endpoints, fmt))
    out.flush()
    return True


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    """
    Main entry point: publish DNS endpoints derived from Docker container labels.

    Args:
        argv: Command-line arguments.
        out: Stream for rendered endpoints (default: sys.stdout).

    Returns:
        An exit code: 0 on success, 1 on configuration or Docker errors.

    Example use:
        CLI:
            harbordns --config config.yaml --once
    """
    parser = argparse.ArgumentParser(
        description="Derive DNS endpoint records from Docker container labels"
    )
    parser.add_argument("--config", default="config.yaml", help="Path to YAML config")
    parser.add_argument(
        "-v",
        "--var",
        action="append",
        default=[],
        metavar="KEY=YAML",
        help="Override a config variable (repeatable)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Resolve endpoints a single time and exit",
    )
    args = parser.parse_args(argv)
    if out is None:
        out = sys.stdout

    try:
        cfg = parse_config_file(args.config, cli_vars=args.var)
    except (OSError, ValueError) as exc:
        print(f"harbordns: {exc}", file=sys.stderr)
        return 1

    init_logging(cfg.logging.model_dump())
    src_cfg = cfg.source
    fmt = cfg.output.format

    try:
        source = DockerEngineSource.from_config(
            src_cfg.url,
            cluster_mode=src_cfg.cluster_mode_flag,
            timeout_second=src_cfg.timeout_second,
        )
    except DOCKER_ERRORS as exc:
        logger.error("failed to connect to docker: %s", exc)
        return 1

    if args.once or (src_cfg.interval_second <= 0 and not src_cfg.watch_events):
        return 0 if run_cycle(source, fmt, out) else 1

    wake = threading.Event()
    stop = threading.Event()
    if src_cfg.watch_events:
        source.add_event_handler(wake.set)
        threading.Thread(
            target=source.watch_events,
            args=(stop,),
            name="HarborDockerEvents",
            daemon=True,
        ).start()

    # interval_second == 0 with watch_events waits for events only.
    timeout = src_cfg.interval_second if src_cfg.interval_second > 0 else None
    try:
        while True:
            run_cycle(source, fmt, out)
            wake.wait(timeout)
            wake.clear()
    except KeyboardInterrupt:
        logger.info("interrupted; exiting")
    finally:
        stop.set()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
