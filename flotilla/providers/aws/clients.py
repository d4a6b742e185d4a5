"""Per-run cache of boto3 clients."""

import threading
from typing import Any

import boto3


class ClientCache:
    """Create boto3 clients lazily, one per service and region.

    Client creation is serialized because the default boto3 session is not
    thread safe; the clients themselves are and can be shared by workers.

    Parameters
    ----------
    boto3_client_factory : Callable[..., Any] | None
        Optional factory for creating boto3 clients. If None, uses boto3.client
    """

    def __init__(self, boto3_client_factory: Any | None = None) -> None:
        self.boto3_client_factory = boto3_client_factory or boto3.client
        self._clients: dict[tuple[str, str], Any] = {}
        self._lock = threading.Lock()

    def get(self, service: str, region: str) -> Any:
        key = (service, region)

        with self._lock:
            if key not in self._clients:
                self._clients[key] = self.boto3_client_factory(
                    service, region_name=region
                )
            return self._clients[key]
