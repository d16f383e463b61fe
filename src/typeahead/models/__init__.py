"""Data models — Query plans, condition trees, result records and schema metadata."""
