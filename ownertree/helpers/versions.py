"""
Detecting the tool's own version.

The codebase does not contain the version directly: it is taken from
the installed package's metadata once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "ownertree", unless renamed/forked.
        version = importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        pass  # not installed, e.g. running from the source tree.
