"""url-readers - read files and trees from remote object stores by URL.

This package provides:
- Integration config extraction for Google Cloud Storage and S3-compatible stores
- Backend readers paired with host-matching predicates
- A registry that dispatches a URL to the reader responsible for it
"""

__version__ = "0.1.0"
