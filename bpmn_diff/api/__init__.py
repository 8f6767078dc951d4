"""HTTP interface for the comparison engine."""
