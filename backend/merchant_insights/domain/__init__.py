"""Static domain tables and pure business rules."""
