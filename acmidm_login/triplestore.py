"""
Clients for the graph store holding users, accounts and sessions.

Two backends are provided, and both expose the same ``query``, ``update``
and ``ask`` methods:

- :class:`.SPARQLClient` talks to a SPARQL 1.1 endpoint over HTTP.
- :class:`.MemoryStore` evaluates queries against an in-process
  :class:`rdflib.Dataset`. Useful for development and testing.

Query results are returned as a list of solutions, each mapping variable
names (without the leading ``?``) to the lexical value of the bound term.
"""

import logging
from typing import Dict, List, Optional, Union

import requests
from rdflib import Dataset

from .config import MEMORY_ENDPOINT, StoreConfig
from .exceptions import QueryFailed, UpdateFailed

logger = logging.getLogger(__name__)

Bindings = List[Dict[str, str]]

RESULTS_JSON = 'application/sparql-results+json'


class SPARQLClient(object):
    """
    Manages requests to a SPARQL endpoint.

    The underlying :class:`requests.Session` pools connections, so a
    single client can be shared by all requests handled by a process.
    """

    def __init__(self, endpoint: str, update_endpoint: Optional[str] = None,
                 timeout: Optional[float] = None,
                 headers: Optional[Dict[str, str]] = None) -> None:
        """Set up the HTTP session for ``endpoint``."""
        logger.debug('New SPARQL client for %s', endpoint)
        self.endpoint = endpoint
        self.update_endpoint = update_endpoint or endpoint
        self.timeout = timeout
        self._session = requests.Session()
        if headers:
            self._session.headers.update(headers)

    def query(self, query: str) -> Bindings:
        """
        Execute a SELECT query.

        Parameters
        ----------
        query : str

        Returns
        -------
        list
            One dict per solution.

        Raises
        ------
        :class:`.QueryFailed`

        """
        data = self._post_query(query)
        try:
            rows = data['results']['bindings']
        except (KeyError, TypeError) as e:
            raise QueryFailed(f'Unexpected query response: {data}') from e
        return [{var: term['value'] for var, term in row.items()}
                for row in rows]

    def ask(self, query: str) -> bool:
        """Execute an ASK query."""
        data = self._post_query(query)
        try:
            return bool(data['boolean'])
        except (KeyError, TypeError) as e:
            raise QueryFailed(f'Unexpected ask response: {data}') from e

    def update(self, update: str) -> None:
        """
        Execute an update.

        Raises
        ------
        :class:`.UpdateFailed`

        """
        logger.debug('Executing update: %s', update)
        try:
            response = self._session.post(self.update_endpoint,
                                          data={'update': update},
                                          timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.ConnectionError as e:
            raise UpdateFailed(f'Connection failed: {e}') from e
        except requests.exceptions.RequestException as e:
            raise UpdateFailed(f'Failed to update: {e}') from e

    def _post_query(self, query: str) -> dict:
        logger.debug('Executing query: %s', query)
        try:
            response = self._session.post(self.endpoint,
                                          data={'query': query},
                                          headers={'Accept': RESULTS_JSON},
                                          timeout=self.timeout)
            response.raise_for_status()
            data: dict = response.json()
        except requests.exceptions.ConnectionError as e:
            raise QueryFailed(f'Connection failed: {e}') from e
        except requests.exceptions.RequestException as e:
            raise QueryFailed(f'Failed to query: {e}') from e
        except ValueError as e:
            raise QueryFailed(f'Response is not valid JSON: {e}') from e
        return data


class MemoryStore(object):
    """Evaluates queries and updates against an in-process RDF dataset."""

    def __init__(self, dataset: Optional[Dataset] = None) -> None:
        self.dataset = dataset if dataset is not None else Dataset()

    def query(self, query: str) -> Bindings:
        """Execute a SELECT query."""
        logger.debug('Executing query: %s', query)
        try:
            result = self.dataset.query(query)
            return [{str(var): str(term) for var, term in row.items()}
                    for row in result.bindings]
        except Exception as e:
            raise QueryFailed(f'Failed to query: {e}') from e

    def ask(self, query: str) -> bool:
        """Execute an ASK query."""
        logger.debug('Executing query: %s', query)
        try:
            return bool(self.dataset.query(query).askAnswer)
        except Exception as e:
            raise QueryFailed(f'Failed to query: {e}') from e

    def update(self, update: str) -> None:
        """Execute an update."""
        logger.debug('Executing update: %s', update)
        try:
            self.dataset.update(update)
        except Exception as e:
            raise UpdateFailed(f'Failed to update: {e}') from e


def get_store(config: StoreConfig) -> Union[SPARQLClient, MemoryStore]:
    """Get a graph store client for the configured endpoint."""
    if config.endpoint == MEMORY_ENDPOINT:
        return MemoryStore()
    return SPARQLClient(config.endpoint, config.update_endpoint,
                        timeout=config.timeout)
