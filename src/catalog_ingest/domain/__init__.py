"""Domain layer: catalog model, mapping engine and ingestion services."""
