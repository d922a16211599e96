"""
Detecting the library's own version.

The version is not hard-coded in the sources: it is taken from the metadata
of the installed distribution, once at import time. When the sources are used
without installation (e.g. from a checkout added to ``sys.path``), it is unknown.
"""
import importlib.metadata
from typing import Optional

DISTRIBUTION_NAME = __name__.split('.')[0]  # "aiolinode", unless vendored under another name.

version: Optional[str]
try:
    version = importlib.metadata.version(DISTRIBUTION_NAME)
except importlib.metadata.PackageNotFoundError:
    version = None
