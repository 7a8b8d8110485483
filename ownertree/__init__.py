"""
The main ownertree module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the tool's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from ownertree.clients.auth import (
    connected,
)
from ownertree.clients.login import (
    login,
)
from ownertree.engines.loggers import (
    configure,
    LogFormat,
)
from ownertree.engines.resolving import (
    resolve,
    Override,
    OVERRIDES,
)
from ownertree.engines.viewing import (
    scan_resources,
    get_object,
    build_ownership_view,
)
from ownertree.errors import (
    OwnerTreeError,
    DiscoveryError,
    KindNotFoundError,
    AmbiguousKindError,
    FetchError,
    ObjectNotFoundError,
)
from ownertree.helpers.typedefs import (
    Logger,
)
from ownertree.helpers.versions import (
    version as __version__,
)
from ownertree.structs.bodies import (
    ObjectRecord,
)
from ownertree.structs.catalogs import (
    ResourceCatalog,
)
from ownertree.structs.configuration import (
    OwnerTreeSettings,
    NetworkingSettings,
    FetchingSettings,
)
from ownertree.structs.credentials import (
    ConnectionInfo,
    LoginError,
)
from ownertree.structs.ownership import (
    OwnershipDirectory,
    children_of,
)
from ownertree.structs.references import (
    Resource,
    Namespace,
    NamespaceName,
)

__all__ = [
    'connected', 'login',
    'configure', 'LogFormat',
    'resolve', 'Override', 'OVERRIDES',
    'scan_resources', 'get_object', 'build_ownership_view',
    'OwnerTreeError',
    'DiscoveryError',
    'KindNotFoundError',
    'AmbiguousKindError',
    'FetchError',
    'ObjectNotFoundError',
    'Logger',
    'ObjectRecord',
    'ResourceCatalog',
    'OwnerTreeSettings',
    'NetworkingSettings',
    'FetchingSettings',
    'ConnectionInfo',
    'LoginError',
    'OwnershipDirectory',
    'children_of',
    'Resource',
    'Namespace',
    'NamespaceName',
]
