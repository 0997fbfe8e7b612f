#!/usr/bin/env python3
"""
kwarchive Error Taxonomy

Fatal errors (config, connection) abort a whole batch request.
Everything else is confined to the response slot of one sub-query.
"""

from typing import Optional


class ArchiveError(Exception):
    """Base class for every error raised by the keyword archive service."""


class ConfigError(ArchiveError):
    """Connection settings are missing or invalid."""


class ArchiveConnectionError(ArchiveError):
    """The archive store cannot be reached at all."""


class KeywordNotFound(ArchiveError):
    """No metadata row exists for a keyword. Not reported to the caller as an error."""

    def __init__(self, service: str, keyword: str):
        super().__init__(f"no metadata for {service}.{keyword}")
        self.service = service
        self.keyword = keyword


class MetadataLookupError(ArchiveError):
    """Store failure while resolving a keyword's type."""


class ScanError(ArchiveError):
    """Store or decode failure while fetching samples."""


class RowIterationError(ArchiveError):
    """Store failure while advancing the result cursor; rows read so far are kept."""


class UnknownConversion(ArchiveError):
    def __init__(self, code):
        super().__init__(f"Unknown unit conversion: {code}")
        self.code = code


class UnknownTransform(ArchiveError):
    def __init__(self, code):
        super().__init__(f"Unknown transform: {code}")
        self.code = code


class MalformedQuery(ArchiveError):
    """The query payload or its queryText cannot be interpreted."""


class QueryCancelled(ArchiveError):
    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or "query cancelled")


FATAL_ERRORS = (ConfigError, ArchiveConnectionError)
