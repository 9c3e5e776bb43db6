"""
Version parsing and comparison utilities for winapptool.

Package folders in the cache encode their version in the directory name
(Microsoft.Windows.SDK.BuildTools.10.0.26100.1742) and SDK bin folders are
named by SDK version (bin/10.0.26100.0). Both are purely numeric dotted
versions compared component-wise with zero padding.

Public API
----------
DottedVersion : dataclass
    Ordered tuple of non-negative integers with padded comparison.
try_parse_dotted_version : function
    Parse text into a DottedVersion, or None when it does not parse.
parse_dotted_version : function
    Strict variant that raises ValueError.
compare_versions : function
    Lenient comparison of registry version strings, returning -1, 0, or 1.

Examples
--------
    >>> from winapptool.versioning import parse_dotted_version
    >>> parse_dotted_version("10.0.26100.1") > parse_dotted_version("10.0.22000.1")
    True
    >>> parse_dotted_version("10.0") == parse_dotted_version("10.0.0.0")
    True
"""

from .keys import (
    DottedVersion,
    compare_versions,
    parse_dotted_version,
    try_parse_dotted_version,
)

__all__ = [
    "DottedVersion",
    "compare_versions",
    "parse_dotted_version",
    "try_parse_dotted_version",
]
