"""Freestealer: a community catalogue of free hosting tiers."""
