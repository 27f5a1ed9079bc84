"""Array-like operations over an insertion-ordered mapping of positions to values.

See README.md for complete documentation and usage examples.
"""

import logging

from maparray.maparray import NOT_FOUND, Found, InvalidIndexError, NotFound, is_index, maparray

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["NOT_FOUND", "Found", "InvalidIndexError", "NotFound", "is_index", "maparray"]
