# collectors.py

"""Clients for node facts and the broker's district and user records."""

import concurrent.futures
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

import requests

from .config import (
    DEFAULT_BATCH_SIZE, DEFAULT_BROKER_TIMEOUT, DEFAULT_FACTS_PATH,
    DEFAULT_FACTS_PORT, DEFAULT_WAIT
)
from .exceptions import CollectionError, DataStoreError
from .models import DistrictEntry, NodeEntry, district_entry_from_record, node_entry_from_facts
from .utils import get_session

logger = logging.getLogger(__name__)

class NodeFactsCollector:
    """
    Fans a facts request out to every node and keeps whatever answers in time.

    Nodes that fail or do not answer within the wait are left out of the
    result; they show up later as missing nodes of their district. Unless
    max_workers is given, every node gets its own worker so all requests
    start together and share the same wait.
    """

    def __init__(
        self,
        hosts: List[str],
        session: Optional[requests.Session] = None,
        port: int = DEFAULT_FACTS_PORT,
        path: str = DEFAULT_FACTS_PATH,
        max_workers: Optional[int] = None
    ):
        self.hosts = list(hosts)
        self.session = session or get_session()
        self.port = port
        self.path = path
        self.max_workers = max_workers

    def facts_url(self, host: str) -> str:
        return f"http://{host}:{self.port}{self.path}"

    def fetch_facts(self, host: str, timeout: float) -> Mapping[str, Any]:
        """Fetch the raw facts of a single node."""
        response = self.session.get(self.facts_url(host), timeout=timeout)
        response.raise_for_status()
        return response.json()

    def collect(self, timeout: float = DEFAULT_WAIT) -> Dict[str, NodeEntry]:
        """
        Collect node entries from all hosts.

        Args:
            timeout: Overall seconds to wait for answers

        Returns:
            NodeEntry keyed by host for the nodes that answered

        Raises:
            CollectionError: If no node could be connected to at all
        """
        if not self.hosts:
            logger.warning("No nodes to collect facts from")
            return {}

        nodes: Dict[str, NodeEntry] = {}
        unreachable = 0
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers or len(self.hosts)
        )
        try:
            futures = {
                executor.submit(self.fetch_facts, host, timeout): host
                for host in self.hosts
            }
            done, not_done = concurrent.futures.wait(futures, timeout=timeout)

            for future in done:
                host = futures[future]
                try:
                    nodes[host] = node_entry_from_facts(host, future.result())
                except requests.ConnectionError as e:
                    unreachable += 1
                    logger.warning(f"Node {host} is unreachable: {e}")
                except (requests.RequestException, ValueError, TypeError) as e:
                    logger.warning(f"Node {host} returned no usable facts: {e}")

            for future in not_done:
                logger.warning(f"Node {futures[future]} did not respond within {timeout}s")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if unreachable == len(self.hosts):
            raise CollectionError(f"Could not connect to any of {len(self.hosts)} nodes")

        logger.debug(f"Collected facts from {len(nodes)} of {len(self.hosts)} nodes")
        return nodes


class BrokerClient:
    """REST client for the broker that stores districts and user records."""

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_BROKER_TIMEOUT,
        batch_size: int = DEFAULT_BATCH_SIZE
    ):
        self.base_url = base_url.rstrip('/')
        self.session = session or get_session()
        self.timeout = timeout
        self.batch_size = batch_size

    def _get(self, resource: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{resource}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise DataStoreError(f"Failed to query {url}: {e}")
        except ValueError as e:
            raise DataStoreError(f"Invalid JSON from {url}: {e}")

    def list_districts(self) -> Dict[str, DistrictEntry]:
        """Fetch every district definition, keyed by uuid."""
        districts = {}
        for record in self._get("districts"):
            entry = district_entry_from_record(record)
            districts[entry.uuid] = entry
        logger.debug(f"Fetched {len(districts)} districts")
        return districts

    def list_nodes(self) -> List[str]:
        """Fetch the hostnames of every node known to the broker."""
        return [node['name'] for node in self._get("nodes")]

    def iter_user_batches(self) -> Iterator[List[Mapping[str, Any]]]:
        """Yield user documents one page at a time until a short page."""
        offset = 0
        while True:
            batch = self._get("users", params={"offset": offset, "limit": self.batch_size})
            if batch:
                yield batch
            if len(batch) < self.batch_size:
                return
            offset += len(batch)
