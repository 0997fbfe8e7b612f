"""
Keyword metadata resolution.

Decides whether a service.keyword pair stores scalar or string values.
"""

import logging

import peewee

from ...core.errors import KeywordNotFound, MetadataLookupError
from ...models import ArchiveStore
from .series import KeywordKind

logger = logging.getLogger("kwarchive.server")


def resolve_kind(store: ArchiveStore, service: str, keyword: str) -> KeywordKind:
    """
    Look up the stored type of a keyword.

    Raises:
        KeywordNotFound: no metadata row for the pair
        MetadataLookupError: any other store failure
    """
    meta = store.meta_model
    try:
        row = (meta.select(meta.type)
               .where((meta.service == service) & (meta.keyword == keyword))
               .limit(1)
               .tuples()
               .first())
    except peewee.PeeweeException as e:
        logger.error(f"Error resolving type of {service}.{keyword}: {e}")
        raise MetadataLookupError(f"metadata lookup failed for {service}.{keyword}: {e}") from e

    if row is None:
        logger.info(f"No metadata for {service}.{keyword}")
        raise KeywordNotFound(service, keyword)

    kind = KeywordKind.from_type(row[0])
    logger.debug(f"{service}.{keyword} type is {row[0]} ({kind.value})")
    return kind
