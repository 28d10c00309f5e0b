"""Module loaders: turn candidate identities into module descriptors."""

from blastradius.loader.base import ModuleLoader
from blastradius.loader.python_loader import PythonModuleLoader, scan_imports

__all__ = ["ModuleLoader", "PythonModuleLoader", "scan_imports"]
