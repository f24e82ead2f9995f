"""DockerEngineSource: list containers and swarm services via the Docker SDK.

Brief:
  - Fetches one snapshot of running containers (and swarm services when the
    engine is a swarm manager) and hands it to endpoints_from_containers.
  - Keeps an explicit list of no-argument event handlers that are notified
    when Docker reports container lifecycle events.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import docker
import requests
from docker.errors import DockerException

from harbordns.endpoint import Endpoint
from harbordns.models import ContainerSnapshot
from harbordns.resolver import endpoints_from_containers

logger = logging.getLogger(__name__)

# Container lifecycle actions that change the published record set.
WATCHED_ACTIONS = frozenset(
    {"start", "die", "stop", "kill", "destroy", "pause", "unpause"}
)

# docker-py surfaces transport failures as plain requests exceptions.
DOCKER_ERRORS = (DockerException, requests.exceptions.RequestException)


class ContainerListError(RuntimeError):
    """Raised when the Docker engine cannot list containers."""


class EventHandlers:
    """Brief: Append-only list of no-argument callbacks.

    Example:
      >>> calls = []
      >>> handlers = EventHandlers()
      >>> handlers.subscribe(lambda: calls.append(1))
      >>> handlers.notify()
      >>> calls
      [1]
    """

    def __init__(self) -> None:
        self._handlers: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Callable[[], None]) -> None:
        with self._lock:
            self._handlers.append(handler)

    def notify(self) -> None:
        """Call every handler in subscription order; failures are logged."""

        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler()
            except Exception as exc:  # pragma: no cover - handler bugs are logged
                logger.warning("event handler %r failed: %s", handler, exc)

    def __len__(self) -> int:
        return len(self._handlers)


class DockerEngineSource:
    """Brief: Endpoint source backed by a Docker engine.

    Inputs:
      - client: docker.DockerClient (or any object exposing containers.list,
        services.list, info and events).
      - cluster_mode: True/False to force swarm grouping on or off; None to
        detect it from the engine on every call to endpoints().

    Outputs:
      - DockerEngineSource instance.
    """

    def __init__(self, client: Any, *, cluster_mode: Optional[bool] = None) -> None:
        self.client = client
        self.cluster_mode = cluster_mode
        self._handlers = EventHandlers()

    @classmethod
    def from_config(
        cls,
        url: Optional[str] = None,
        *,
        cluster_mode: Optional[bool] = None,
        timeout_second: Optional[float] = None,
    ) -> "DockerEngineSource":
        """Brief: Create a source with a real Docker client.

        Inputs:
          - url: Docker endpoint URL (e.g. "unix:///var/run/docker.sock");
            when None the client is configured from DOCKER_HOST and friends.
          - cluster_mode: See DockerEngineSource.
          - timeout_second: Optional API timeout.

        Outputs:
          - DockerEngineSource.

        Raises:
          - docker.errors.DockerException: when the client cannot be created.
        """

        kwargs: Dict[str, Any] = {}
        if timeout_second is not None:
            kwargs["timeout"] = int(timeout_second)
        if url:
            client = docker.DockerClient(base_url=url, version="auto", **kwargs)
        else:
            client = docker.from_env(**kwargs)
        return cls(client, cluster_mode=cluster_mode)

    def add_event_handler(self, handler: Callable[[], None]) -> None:
        self._handlers.subscribe(handler)

    def is_cluster_mode(self) -> bool:
        """Brief: Return whether swarm service grouping applies this cycle.

        Inputs:
          - None (uses self.cluster_mode and client.info()).

        Outputs:
          - bool: the configured value, or True when the engine is an active
            swarm node with control access (a manager). Detection failures
            are logged and treated as False.
        """

        if self.cluster_mode is not None:
            return bool(self.cluster_mode)
        try:
            info = self.client.info() or {}
        except DOCKER_ERRORS as exc:
            logger.warning("failed to query engine info; assuming no swarm: %s", exc)
            return False
        swarm = info.get("Swarm") or {}
        return swarm.get("LocalNodeState") == "active" and bool(
            swarm.get("ControlAvailable")
        )

    def _list_services(self) -> Optional[Dict[str, Any]]:
        try:
            services = self.client.services.list()
        except DOCKER_ERRORS as exc:
            logger.warning(
                "failed to list swarm services; disabling swarm grouping this cycle: %s",
                exc,
            )
            return None
        return {svc.id: svc.attrs for svc in services}

    def _list_containers(self) -> List[ContainerSnapshot]:
        try:
            containers = self.client.containers.list(sparse=True)
        except DOCKER_ERRORS as exc:
            raise ContainerListError(f"failed to list containers: {exc}") from exc
        return [ContainerSnapshot.from_docker_attrs(c.attrs) for c in containers]

    def endpoints(self) -> List[Endpoint]:
        """Brief: Fetch a fresh snapshot and resolve it into endpoints.

        Inputs:
          - None.

        Outputs:
          - list[Endpoint] for the current engine state.

        Raises:
          - ContainerListError: when containers cannot be listed.
        """

        cluster_mode = self.is_cluster_mode()
        services: Optional[Dict[str, Any]] = None
        if cluster_mode:
            services = self._list_services()
            if services is None:
                cluster_mode = False

        containers = self._list_containers()
        endpoints = endpoints_from_containers(
            containers, services, cluster_mode=cluster_mode
        )
        logger.debug(
            "resolved %d endpoints from %d containers (swarm=%s)",
            len(endpoints),
            len(containers),
            cluster_mode,
        )
        return endpoints

    def watch_events(self, stop_event: Optional[threading.Event] = None) -> None:
        """Brief: Notify event handlers on container lifecycle events.

        Inputs:
          - stop_event: Optional threading.Event; the watch returns once it is
            set and the next event (or the end of the stream) arrives.

        Outputs:
          - None; blocks until the event stream ends, stop_event is set, or the
            stream fails (failures are logged).
        """

        try:
            stream = self.client.events(decode=True, filters={"type": "container"})
        except DOCKER_ERRORS as exc:
            logger.warning("failed to subscribe to docker events: %s", exc)
            return

        try:
            for event in stream:
                if stop_event is not None and stop_event.is_set():
                    break
                action = str((event or {}).get("Action") or "").split(":", 1)[0]
                if action in WATCHED_ACTIONS:
                    logger.debug("docker event %s; notifying handlers", action)
                    self._handlers.notify()
        except DOCKER_ERRORS as exc:
            logger.warning("docker event stream failed: %s", exc)
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()
