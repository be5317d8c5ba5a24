"""Defines the identity and session concepts handled by the login service."""

from typing import Any, Dict, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict


class Claims(BaseModel):
    """
    Identity claims asserted by the identity provider for a logged-in user.

    Claims are not validated here; the login handler is expected to have
    verified them. Missing values end up as empty strings in the store.
    Claims that are not used to create accounts (``doelgroepcode``,
    ``rollen``, ...) are kept as extra attributes.
    """

    model_config = ConfigDict(extra='allow', coerce_numbers_to_str=True)

    vo_id: Optional[str] = None
    """Stable external account identifier."""

    given_name: Optional[str] = None
    family_name: Optional[str] = None

    rrn: Optional[str] = None
    """National registry number (rijksregisternummer)."""


class AccountRef(NamedTuple):
    """An online account, as found in or written to the store."""

    account_uri: Optional[str] = None
    account_id: Optional[str] = None

    @property
    def found(self) -> bool:
        """Whether this refers to an existing account."""
        return self.account_uri is not None


class SessionRef(NamedTuple):
    """A session that was written to the store."""

    session_uri: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.session_uri is not None


class GroupRef(NamedTuple):
    """A bestuurseenheid, as found in the store."""

    group_uri: Optional[str] = None
    group_id: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.group_uri is not None


class CurrentSession(NamedTuple):
    """The session of an account along with the group it was opened for."""

    session_uri: Optional[str] = None
    session_id: Optional[str] = None
    group_uri: Optional[str] = None
    group_id: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.session_uri is not None


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def to_dict(obj: NamedTuple) -> Dict[str, Any]:
    """
    Generate a dict representation of a result tuple.

    Keys are camel-cased, e.g. ``account_uri`` becomes ``accountUri``, which
    is the shape the login handler sends to the frontend.
    """
    return {_camel_case(key): value for key, value in obj._asdict().items()}
