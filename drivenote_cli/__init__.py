"""Compatibility wrapper for the nested drivenote_cli package.

The actual CLI implementation lives in ``drivenote_cli/drivenote_cli`` so that
it can be packaged with setuptools.  When running directly from a source
checkout, however, ``python -m drivenote_cli.drivenote_cli`` expects
``drivenote_cli`` to be importable as a top level package.  This module
re-exports the inner package's public modules to provide that compatibility.
"""

from importlib import import_module as _import_module
import sys as _sys

_inner = _import_module(".drivenote_cli", __name__)
_core = _import_module(".drivenote_cli.core", __name__)
_commands = _import_module(".drivenote_cli.commands", __name__)

__all__ = ["__version__", "core", "commands"]
__version__ = getattr(_inner, "__version__", "0")
core = _core
commands = _commands

# Expose submodules so ``import drivenote_cli.commands`` works
_sys.modules[__name__ + ".core"] = _core
_sys.modules[__name__ + ".commands"] = _commands
_sys.modules[__name__ + ".drivenote_cli"] = _inner

# Ensure package behaves like the inner implementation for submodule discovery
__path__ = _inner.__path__
