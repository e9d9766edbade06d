"""Request and response schemas. Field names are camelCase on the wire."""
