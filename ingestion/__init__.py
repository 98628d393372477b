"""Ingestion module for API data."""
from ingestion.games import ApiSportsClient
from ingestion.odds import OddsApiClient

__all__ = ['ApiSportsClient', 'OddsApiClient']
