"""Collectors package."""

from guildexport.ingestion.collectors.response_collector import ResponseCollector

__all__ = ["ResponseCollector"]
