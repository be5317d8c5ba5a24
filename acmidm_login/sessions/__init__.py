"""
Integration with the session data in the graph store.

Sessions are kept as triples about the session IRI assigned by the identifier
service, linking it to an account and a bestuurseenheid. Accounts and the
persons owning them are created on first login.

See :mod:`.store`.
"""

from . import store
from .store import SessionStore, current_store, get_session_store
