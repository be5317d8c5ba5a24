"""Testing helpers."""

from contextlib import contextmanager
from typing import Generator, Iterable, Tuple

from rdflib import Literal, URIRef
from rdflib.namespace import DCTERMS, RDF

from ..config import StoreConfig
from ..sessions.store import SessionStore
from ..sparql import BESLUIT, MU
from ..triplestore import MemoryStore

GRAPH = 'http://mu.semte.ch/graphs/test'


@contextmanager
def temporary_store(graph: str = GRAPH, **kwargs) \
        -> Generator[SessionStore, None, None]:
    """Provide a session store backed by an in-memory dataset."""
    config = StoreConfig(graph=graph, endpoint='memory:')
    yield SessionStore(MemoryStore(), config, **kwargs)


def add_group(store: SessionStore, group_uri: str, group_id: str,
              ovo_number: str) -> None:
    """Add a bestuurseenheid to the graph of ``store``."""
    graph = store.store.dataset.graph(URIRef(store.config.graph))
    group = URIRef(group_uri)
    graph.add((group, RDF.type, BESLUIT.Bestuurseenheid))
    graph.add((group, MU.uuid, Literal(group_id)))
    graph.add((group, DCTERMS.identifier, Literal(ovo_number)))


def triples_about(store: SessionStore, subject: str) \
        -> Iterable[Tuple[URIRef, URIRef, object]]:
    """Get the triples in the graph of ``store`` with the given subject."""
    graph = store.store.dataset.graph(URIRef(store.config.graph))
    return list(graph.triples((URIRef(subject), None, None)))
