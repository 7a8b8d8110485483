"""
All configuration flags, options, settings to fine-tune the inspection.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).
The credentials are not the settings: see :mod:`ownertree.structs.credentials`.
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request (incl. all pages' reading), in seconds.
    ``None`` means no timeout.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the TCP connection, in seconds.
    ``None`` means the same as the request timeout.
    """


@dataclasses.dataclass
class FetchingSettings:
    """
    Settings for listing the objects of the resources.
    """

    page_size: int = 250
    """
    How many objects to request in one page of a list call.

    The server can return fewer objects in a page, and will return the cursor
    for the next page if there are more objects. All pages are always fetched;
    the page size only affects how many requests are made to get them all.
    """

    max_concurrency: Optional[int] = None
    """
    How many resources can be listed in parallel (``None`` for unlimited).

    Every namespaced resource is listed in its own task. In clusters with many
    custom resources, this can mean hundreds of simultaneous requests.
    The limit makes the excessive tasks wait until the previous ones are done.
    """


@dataclasses.dataclass
class OwnerTreeSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    fetching: FetchingSettings = dataclasses.field(default_factory=FetchingSettings)
