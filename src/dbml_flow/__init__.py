"""Command line tools for DBML entity-relationship diagrams."""
