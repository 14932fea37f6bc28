"""Response classification.

Batched API calls come back as fragments whose identifier is either the API
call name (``clanGetInfo``) or an anonymous group id (``group_3_body``,
``body``). Named fragments are looked up directly; anonymous ones are
recognised by matching the payload against the catalog schemas in order.
"""

from collections.abc import Mapping, Sequence

from guildexport.ingestion.catalog import DATASET_CATALOG, NAMED_DATASETS, DatasetDescriptor
from guildexport.ingestion.schema import validate_schema

GROUP_PREFIX = "group_"
BATCH_BODY_IDENT = "body"


def is_group_identifier(identifier: str | None) -> bool:
    """True for identifiers that carry no dataset name."""
    if not isinstance(identifier, str):
        return False
    return identifier.startswith(GROUP_PREFIX) or identifier == BATCH_BODY_IDENT


def find_by_schema(
    payload, catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG
) -> DatasetDescriptor | None:
    """First catalog entry whose schema matches `payload`."""
    if payload is None:
        return None
    for info in catalog:
        if validate_schema(payload, info.schema):
            return info
    return None


def find_schema_conflicts(
    payload, catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG
) -> list[str]:
    """Ids of every catalog entry whose schema matches `payload`."""
    if payload is None:
        return []
    return [info.id for info in catalog if validate_schema(payload, info.schema)]


def classify(
    identifier: str | None,
    payload,
    catalog: Sequence[DatasetDescriptor] = DATASET_CATALOG,
    named_index: Mapping[str, DatasetDescriptor] = NAMED_DATASETS,
) -> DatasetDescriptor | None:
    """Map a response fragment to its dataset descriptor.

    Args:
        identifier: Fragment identifier from the envelope (`ident`).
        payload: Fragment body (`result.response`).
        catalog: Ordered catalog searched for anonymous fragments.
        named_index: Name lookup for named fragments.

    Returns:
        The matching descriptor, or None when the fragment is unknown.
    """
    if is_group_identifier(identifier):
        return find_by_schema(payload, catalog)
    if not isinstance(identifier, str):
        return None
    return named_index.get(identifier)
