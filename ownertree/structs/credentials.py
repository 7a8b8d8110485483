"""
The credentials to connect to the API, as found by :mod:`ownertree.clients.login`.

Only what an HTTP client can use directly is kept here: the server's address,
the TLS flags & certificates, and the ``Authorization`` header's ingredients.
Credentials plugins of kubeconfigs (``exec``, ``auth-provider`` scripts)
are not executed; only their already cached tokens are used.
"""
import dataclasses
from typing import Optional, Union


class LoginError(Exception):
    """ Raised when the credentials cannot be found or interpreted. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """ The server and everything needed to connect and authenticate to it. """
    server: str  # e.g. "https://localhost:443"
    ca_path: Optional[str] = None
    ca_data: Optional[Union[str, bytes]] = None
    insecure: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: Optional[str] = None  # the Authorization scheme; "Bearer" if only a token is set
    token: Optional[str] = None
    certificate_path: Optional[str] = None
    certificate_data: Optional[Union[str, bytes]] = None
    private_key_path: Optional[str] = None
    private_key_data: Optional[Union[str, bytes]] = None
    default_namespace: Optional[str] = None  # if not specified in the command line
