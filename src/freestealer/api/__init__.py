"""HTTP API for the Freestealer backend."""
