"""Data ingestion module - schemas, catalog, classifier, store and collectors."""

from guildexport.ingestion.catalog import DATASET_CATALOG, NAMED_DATASETS, DatasetDescriptor
from guildexport.ingestion.classifier import classify
from guildexport.ingestion.collectors import ResponseCollector
from guildexport.ingestion.schema import validate_schema
from guildexport.ingestion.store import AggregationStore, DatasetRecord, SnapshotParseError

__all__ = [
    "AggregationStore",
    "DATASET_CATALOG",
    "DatasetDescriptor",
    "DatasetRecord",
    "NAMED_DATASETS",
    "ResponseCollector",
    "SnapshotParseError",
    "classify",
    "validate_schema",
]
