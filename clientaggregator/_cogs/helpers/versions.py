"""
Detecting the library's own version.

The version is determined only once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "clientaggregator", unless renamed/forked.
        version = importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        pass  # used from the source tree without installation.
