"""
Detecting the library's own version.

The version is determined only once at startup when the code is loaded,
and is used to self-identify in the User-Agent of the API requests.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "kubecall", unless renamed/forked.
        version = importlib.metadata.version(name)
    except Exception:
        pass  # running from a source tree, not installed.
