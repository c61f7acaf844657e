"""groupby - group tokens from a stream and run a command per group"""

from groupby.__version__ import __version__

__all__ = ['__version__']
