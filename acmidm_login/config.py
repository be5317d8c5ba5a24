"""Configuration for the login session store."""

import os
from typing import Mapping, NamedTuple, Optional

MEMORY_ENDPOINT = 'memory:'
"""Endpoint value that selects the in-process graph store."""

DEFAULT_GRAPH = 'http://mu.semte.ch/application'
DEFAULT_ENDPOINT = 'http://database:8890/sparql'
DEFAULT_SERVICE_HOMEPAGE = 'https://github.com/lblod/acmidm-login-service'
DEFAULT_RESOURCE_BASE_URI = 'http://data.lblod.info/'

APPLICATION_GRAPH = os.environ.get('MU_APPLICATION_GRAPH', DEFAULT_GRAPH)
"""Graph in which users, accounts and sessions are kept."""

SPARQL_ENDPOINT = os.environ.get('MU_SPARQL_ENDPOINT', DEFAULT_ENDPOINT)
SPARQL_UPDATEPOINT = os.environ.get('MU_SPARQL_UPDATEPOINT', SPARQL_ENDPOINT)
SPARQL_TIMEOUT = os.environ.get('SPARQL_TIMEOUT')
"""Timeout in seconds for requests to the SPARQL endpoint."""

SERVICE_HOMEPAGE = os.environ.get('SERVICE_HOMEPAGE',
                                  DEFAULT_SERVICE_HOMEPAGE)
RESOURCE_BASE_URI = os.environ.get('RESOURCE_BASE_URI',
                                   DEFAULT_RESOURCE_BASE_URI)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class StoreConfig(NamedTuple):
    """Settings that scope every query issued by the session store."""

    graph: str = DEFAULT_GRAPH
    """IRI of the graph holding users, accounts and sessions."""

    service_homepage: str = DEFAULT_SERVICE_HOMEPAGE
    """Value of ``foaf:accountServiceHomepage`` on created accounts."""

    person_base_uri: str = f'{DEFAULT_RESOURCE_BASE_URI}id/persoon/'
    account_base_uri: str = f'{DEFAULT_RESOURCE_BASE_URI}id/account/'
    identifier_base_uri: str = f'{DEFAULT_RESOURCE_BASE_URI}id/identificator/'

    endpoint: str = DEFAULT_ENDPOINT
    update_endpoint: Optional[str] = None
    """Falls back to :attr:`endpoint` when not set."""

    timeout: Optional[float] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] = os.environ) \
            -> 'StoreConfig':
        """Build a configuration from environment variables."""
        base = environ.get('RESOURCE_BASE_URI', DEFAULT_RESOURCE_BASE_URI)
        endpoint = environ.get('MU_SPARQL_ENDPOINT', DEFAULT_ENDPOINT)
        timeout = environ.get('SPARQL_TIMEOUT')
        return cls(
            graph=environ.get('MU_APPLICATION_GRAPH', DEFAULT_GRAPH),
            service_homepage=environ.get('SERVICE_HOMEPAGE',
                                         DEFAULT_SERVICE_HOMEPAGE),
            person_base_uri=f'{base}id/persoon/',
            account_base_uri=f'{base}id/account/',
            identifier_base_uri=f'{base}id/identificator/',
            endpoint=endpoint,
            update_endpoint=environ.get('MU_SPARQL_UPDATEPOINT', endpoint),
            timeout=float(timeout) if timeout else None
        )


def get_config() -> StoreConfig:
    """Get the configuration defined by this module's settings."""
    return StoreConfig(
        graph=APPLICATION_GRAPH,
        service_homepage=SERVICE_HOMEPAGE,
        person_base_uri=f'{RESOURCE_BASE_URI}id/persoon/',
        account_base_uri=f'{RESOURCE_BASE_URI}id/account/',
        identifier_base_uri=f'{RESOURCE_BASE_URI}id/identificator/',
        endpoint=SPARQL_ENDPOINT,
        update_endpoint=SPARQL_UPDATEPOINT,
        timeout=float(SPARQL_TIMEOUT) if SPARQL_TIMEOUT else None
    )
