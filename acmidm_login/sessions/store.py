"""
Internal service API for users, accounts and sessions in the graph store.

Used to resolve identity claims into an account, and to create, look up and
remove the session records of logged-in users.
"""

import logging
import uuid
from datetime import datetime
from functools import lru_cache, wraps
from typing import Any, Callable, Mapping, Optional, Union

from pytz import UTC

from .. import domain
from ..config import StoreConfig, get_config
from ..exceptions import GraphStoreError
from ..sparql import datetime_literal, prepare, string, uri
from ..triplestore import get_store

logger = logging.getLogger(__name__)


def _generate_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(tz=UTC)


REMOVE_SESSION = '''
WITH $graph
DELETE {
  $session session:account ?account ;
           mu:uuid ?id ;
           dcterms:modified ?modified ;
           session:group ?group .
}
WHERE {
  OPTIONAL { $session session:account ?account . }
  OPTIONAL { $session mu:uuid ?id . }
  OPTIONAL { $session dcterms:modified ?modified . }
  OPTIONAL { $session session:group ?group . }
}'''

SELECT_ACCOUNT_BY_IDENTIFIER = '''
SELECT ?account ?accountId
WHERE {
  GRAPH $graph {
    ?user a foaf:Person ;
          mu:uuid ?personId ;
          foaf:account ?account .
    ?account a foaf:OnlineAccount ;
             mu:uuid ?accountId ;
             dcterms:identifier $vo_id .
  }
}'''

INSERT_USER_AND_ACCOUNT = '''
INSERT DATA {
  GRAPH $graph {
    $person a foaf:Person ;
            mu:uuid $person_id ;
            foaf:firstName $given_name ;
            foaf:familyName $family_name ;
            adms:identifier $identifier ;
            foaf:account $account .
    $identifier a adms:Identifier ;
                mu:uuid $identifier_id ;
                skos:notation $rrn .
    $account a foaf:OnlineAccount ;
             mu:uuid $account_id ;
             foaf:accountServiceHomepage $homepage ;
             dcterms:identifier $vo_id ;
             dcterms:created $created .
  }
}'''

INSERT_SESSION = '''
INSERT DATA {
  GRAPH $graph {
    $session mu:uuid $session_id ;
             session:account $account ;
             session:group $group ;
             dcterms:modified $modified .
  }
}'''

SELECT_GROUP_BY_OVO_NUMBER = '''
SELECT ?group ?groupId
WHERE {
  GRAPH $graph {
    ?group a besluit:Bestuurseenheid ;
           mu:uuid ?groupId ;
           dcterms:identifier $ovo_number .
  }
}'''

SELECT_ACCOUNT_BY_SESSION = '''
SELECT ?account ?accountId
WHERE {
  GRAPH $graph {
    $session session:account ?account .
    ?account a foaf:OnlineAccount ;
             mu:uuid ?accountId .
  }
}'''

SELECT_CURRENT_SESSION = '''
SELECT ?session ?sessionId ?group ?groupId
WHERE {
  GRAPH $graph {
    ?session session:account $account ;
             mu:uuid ?sessionId ;
             session:group ?group .
    ?group mu:uuid ?groupId .
  }
}'''


class SessionStore(object):
    """
    Reads and writes login data in the application graph.

    Every operation is a single round trip to the graph store (two for
    :meth:`ensure_user_and_account` when the account is new). Nothing is
    cached here, and failures of the graph store propagate as
    :class:`.GraphStoreError`.
    """

    def __init__(self, store: Any, config: Optional[StoreConfig] = None,
                 generate_id: Callable[[], str] = _generate_id,
                 now: Callable[[], datetime] = _now) -> None:
        """
        Set up the accessor.

        Parameters
        ----------
        store
            Graph store client, e.g. a :class:`.SPARQLClient`.
        config : :class:`.StoreConfig`
            Graph and base IRIs to use.
        generate_id : callable
            Produces identifiers for new resources.
        now : callable
            Produces the timestamps for new resources.

        """
        self.store = store
        self.config = config if config is not None else StoreConfig()
        self._generate_id = generate_id
        self._now = now
        self._graph = uri(self.config.graph)

    def remove_session(self, session_uri: str) -> None:
        """
        Delete the data of a session.

        The account link, identifier, modification time and group link of
        the session are removed, whichever of them are present.

        Parameters
        ----------
        session_uri : str

        """
        self.store.update(prepare(REMOVE_SESSION, 'mu', 'session', 'dcterms',
                                  graph=self._graph,
                                  session=uri(session_uri)))
        logger.info('removed session %s', session_uri)

    def remove_old_sessions(self, session_uri: str) -> None:
        """Remove a session before a new login takes its place."""
        self.remove_session(session_uri)

    def remove_current_session(self, session_uri: str) -> None:
        """Remove the session of a user that logs out."""
        self.remove_session(session_uri)

    def ensure_user_and_account(
            self, claims: Union[domain.Claims, Mapping[str, Any]]
    ) -> domain.AccountRef:
        """
        Get the account for a set of claims, creating it if needed.

        Accounts are matched on ``vo_id``. When no account is found, a
        person, their identifier and their account are inserted together.

        Two concurrent first logins with the same ``vo_id`` can both miss
        the lookup and create two accounts; nothing here prevents that.

        Parameters
        ----------
        claims : :class:`.domain.Claims` or dict
            Must provide ``vo_id``, ``given_name``, ``family_name`` and
            ``rrn``.

        Returns
        -------
        :class:`.domain.AccountRef`

        """
        if not isinstance(claims, domain.Claims):
            claims = domain.Claims.model_validate(claims)

        rows = self.store.query(prepare(
            SELECT_ACCOUNT_BY_IDENTIFIER, 'foaf', 'mu', 'dcterms',
            graph=self._graph,
            vo_id=string(claims.vo_id)
        ))
        if rows:
            accounts = {row['account'] for row in rows}
            if len(accounts) > 1:
                logger.warning('Found %i accounts for vo_id %s; using %s',
                               len(accounts), claims.vo_id,
                               rows[0]['account'])
            return domain.AccountRef(rows[0]['account'], rows[0]['accountId'])
        return self._insert_user_and_account(claims)

    def _insert_user_and_account(self, claims: domain.Claims) \
            -> domain.AccountRef:
        person_id = self._generate_id()
        account_id = self._generate_id()
        identifier_id = self._generate_id()
        person = f'{self.config.person_base_uri}{person_id}'
        account = f'{self.config.account_base_uri}{account_id}'
        identifier = f'{self.config.identifier_base_uri}{identifier_id}'

        # TODO: attach doelgroepcode, doelgroepnaam and rollen to the account.
        self.store.update(prepare(
            INSERT_USER_AND_ACCOUNT,
            'foaf', 'mu', 'dcterms', 'adms', 'skos',
            graph=self._graph,
            person=uri(person),
            person_id=string(person_id),
            given_name=string(claims.given_name),
            family_name=string(claims.family_name),
            identifier=uri(identifier),
            identifier_id=string(identifier_id),
            rrn=string(claims.rrn),
            account=uri(account),
            account_id=string(account_id),
            homepage=uri(self.config.service_homepage),
            vo_id=string(claims.vo_id),
            created=datetime_literal(self._now())
        ))
        logger.info('created account %s for vo_id %s', account, claims.vo_id)
        return domain.AccountRef(account, account_id)

    def insert_session_for_account(self, account_uri: str, session_uri: str,
                                   group_uri: str) -> domain.SessionRef:
        """
        Create a session for an account in a group.

        Parameters
        ----------
        account_uri : str
        session_uri : str
            IRI of the session; assigned by the caller.
        group_uri : str
            The bestuurseenheid the user logged in for.

        Returns
        -------
        :class:`.domain.SessionRef`

        """
        session_id = self._generate_id()
        self.store.update(prepare(
            INSERT_SESSION, 'mu', 'session', 'dcterms',
            graph=self._graph,
            session=uri(session_uri),
            session_id=string(session_id),
            account=uri(account_uri),
            group=uri(group_uri),
            modified=datetime_literal(self._now())
        ))
        logger.info('created session %s for account %s', session_uri,
                    account_uri)
        return domain.SessionRef(session_uri, session_id)

    def lookup_group_by_ovo_number(self, ovo_number: str) -> domain.GroupRef:
        """Find the bestuurseenheid identified by an OVO number."""
        rows = self.store.query(prepare(
            SELECT_GROUP_BY_OVO_NUMBER, 'besluit', 'mu', 'dcterms',
            graph=self._graph,
            ovo_number=string(ovo_number)
        ))
        if not rows:
            logger.debug('No bestuurseenheid with OVO number %s', ovo_number)
            return domain.GroupRef()
        return domain.GroupRef(rows[0]['group'], rows[0]['groupId'])

    def lookup_account_by_session(self, session_uri: str) \
            -> domain.AccountRef:
        """Find the account a session belongs to."""
        rows = self.store.query(prepare(
            SELECT_ACCOUNT_BY_SESSION, 'session', 'foaf', 'mu',
            graph=self._graph,
            session=uri(session_uri)
        ))
        if not rows:
            return domain.AccountRef()
        return domain.AccountRef(rows[0]['account'], rows[0]['accountId'])

    def lookup_current_session(self, account_uri: str) \
            -> domain.CurrentSession:
        """Find the session of an account, along with its group."""
        rows = self.store.query(prepare(
            SELECT_CURRENT_SESSION, 'session', 'mu',
            graph=self._graph,
            account=uri(account_uri)
        ))
        if not rows:
            return domain.CurrentSession()
        row = rows[0]
        return domain.CurrentSession(row['session'], row['sessionId'],
                                     row['group'], row['groupId'])

    def is_available(self) -> bool:
        """Check our connection to the graph store."""
        try:
            return bool(self.store.ask('ASK {}'))
        except GraphStoreError as e:
            logger.error('Encountered an error talking to graph store: %s', e)
            return False


def get_session_store(config: Optional[StoreConfig] = None) -> SessionStore:
    """Get a new session store for the configured graph store."""
    if config is None:
        config = get_config()
    return SessionStore(get_store(config), config)


@lru_cache(maxsize=1)
def current_store() -> SessionStore:
    """Get/create the :class:`.SessionStore` for this process."""
    return get_session_store()


@wraps(SessionStore.remove_session)
def remove_session(session_uri: str) -> None:
    """Delete the data of a session."""
    current_store().remove_session(session_uri)


@wraps(SessionStore.remove_old_sessions)
def remove_old_sessions(session_uri: str) -> None:
    """Remove a session before a new login takes its place."""
    current_store().remove_old_sessions(session_uri)


@wraps(SessionStore.remove_current_session)
def remove_current_session(session_uri: str) -> None:
    """Remove the session of a user that logs out."""
    current_store().remove_current_session(session_uri)


@wraps(SessionStore.ensure_user_and_account)
def ensure_user_and_account(
        claims: Union[domain.Claims, Mapping[str, Any]]
) -> domain.AccountRef:
    """Get the account for a set of claims, creating it if needed."""
    return current_store().ensure_user_and_account(claims)


@wraps(SessionStore.insert_session_for_account)
def insert_session_for_account(account_uri: str, session_uri: str,
                               group_uri: str) -> domain.SessionRef:
    """Create a session for an account in a group."""
    return current_store().insert_session_for_account(account_uri,
                                                      session_uri, group_uri)


@wraps(SessionStore.lookup_group_by_ovo_number)
def lookup_group_by_ovo_number(ovo_number: str) -> domain.GroupRef:
    """Find the bestuurseenheid identified by an OVO number."""
    return current_store().lookup_group_by_ovo_number(ovo_number)


@wraps(SessionStore.lookup_account_by_session)
def lookup_account_by_session(session_uri: str) -> domain.AccountRef:
    """Find the account a session belongs to."""
    return current_store().lookup_account_by_session(session_uri)


@wraps(SessionStore.lookup_current_session)
def lookup_current_session(account_uri: str) -> domain.CurrentSession:
    """Find the session of an account, along with its group."""
    return current_store().lookup_current_session(account_uri)


@wraps(SessionStore.is_available)
def is_available() -> bool:
    """Check our connection to the graph store."""
    return current_store().is_available()
