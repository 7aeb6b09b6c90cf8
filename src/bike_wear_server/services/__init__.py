"""Domain services: wear math, stores, ride aggregation, alerts and planning."""
