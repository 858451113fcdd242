"""Service registry client, instance IDs and waiting for a service's port."""

from __future__ import annotations

import logging
import random
import socket
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)

HEALTH_PASSING = "passing"
CHECK_TTL = "5s"
CHECK_TIMEOUT = "5s"
DEREGISTER_CRITICAL_AFTER = "10s"
POLL_INTERVAL = 0.2


class ConsulRegistry:
    """A registry backed by a Consul agent's HTTP API."""

    def __init__(self, address: str, session: Any = None, timeout: float = 10.0):
        self.base_url = address if "://" in address else f"http://{address}"
        self.base_url = self.base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def register(self, instance_id, service_name, host_port) -> None:
        """Register an instance with a TTL health check."""
        parts = host_port.split(":")
        if len(parts) != 2:
            raise ValueError("invalid host:port format")
        host, raw_port = parts
        try:
            port = int(raw_port)
        except ValueError:
            port = 0
        payload = {
            "ID": instance_id,
            "Name": service_name,
            "Address": host,
            "Port": port,
            "Check": {
                "CheckID": instance_id,
                "TLSSkipVerify": False,
                "TTL": CHECK_TTL,
                "Timeout": CHECK_TIMEOUT,
                "DeregisterCriticalServiceAfter": DEREGISTER_CRITICAL_AFTER,
            },
        }
        response = self._session.put(
            self._url("/v1/agent/service/register"), json=payload, timeout=self._timeout
        )
        response.raise_for_status()

    def deregister(self, instance_id, service_name) -> None:
        """Remove an instance from the registry."""
        logger.info("deregister instance from consul: instanceID=%s serviceName=%s", instance_id, service_name)
        response = self._session.put(
            self._url(f"/v1/agent/service/deregister/{instance_id}"), timeout=self._timeout
        )
        response.raise_for_status()

    def discover(self, service_name) -> list[str]:
        """Return host:port of every healthy instance of a service."""
        response = self._session.get(
            self._url(f"/v1/health/service/{service_name}"),
            params={"passing": "true"},
            timeout=self._timeout,
        )
        response.raise_for_status()
        entries = response.json() or []
        return [f"{entry['Service']['Address']}:{entry['Service']['Port']}" for entry in entries]

    def health_check(self, instance_id, service_name) -> None:
        """Report the instance as alive to its TTL check."""
        response = self._session.put(
            self._url(f"/v1/agent/check/update/{instance_id}"),
            json={"Status": HEALTH_PASSING, "Output": "online"},
            timeout=self._timeout,
        )
        response.raise_for_status()


def generate_instance_id(service_name) -> str:
    """Return a random instance ID prefixed with the service name."""
    return f"{service_name}-{random.getrandbits(63)}"


def get_service_addr(registry, service_name) -> str:
    """Pick the address of one discovered instance at random."""
    addrs = registry.discover(service_name)
    if not addrs:
        raise LookupError(f"get empty {service_name} address from consul")
    logger.info(
        "Discovered %d instance of %s address from consul, addrs:%s", len(addrs), service_name, addrs
    )
    return random.choice(addrs)


def wait_for(addr, timeout) -> bool:
    """Poll a TCP address until it accepts a connection or timeout seconds pass."""
    host, _, port = addr.rpartition(":")
    deadline = time.monotonic() + timeout
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        try:
            with socket.create_connection((host or "localhost", int(port)), timeout=remaining):
                return True
        except OSError:
            pass
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        time.sleep(min(POLL_INTERVAL, remaining))