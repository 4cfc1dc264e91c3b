"""Itinerary domain - reply parsing, normalization and place enrichment."""
