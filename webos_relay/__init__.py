"""webos-relay: named-pipe command relay for LG webOS televisions."""

from .version import __version__

__all__ = ["__version__"]
