"""Document reading, extraction and PDF stamping integrations."""
