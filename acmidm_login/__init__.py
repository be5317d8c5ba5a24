"""
Account and session bookkeeping for the ACM/IDM login flow.

This package resolves the claims of a user who logged in with ACM/IDM into
a person and online account in the triple store, and keeps track of the
sessions of logged-in users and the bestuurseenheid they act for.

Quick start
-----------

.. code-block:: python

   from acmidm_login import StoreConfig, SessionStore
   from acmidm_login.triplestore import SPARQLClient

   config = StoreConfig.from_environ()
   store = SessionStore(SPARQLClient(config.endpoint), config)

   account = store.ensure_user_and_account(claims)
   group = store.lookup_group_by_ovo_number(claims['vo_orgcode'])
   store.remove_old_sessions(session_uri)
   store.insert_session_for_account(account.account_uri, session_uri,
                                    group.group_uri)

The module-level functions in :mod:`acmidm_login.sessions.store` do the same
with a store configured from the environment.
"""

from .config import StoreConfig
from .domain import AccountRef, Claims, CurrentSession, GroupRef, SessionRef
from .sessions import SessionStore
