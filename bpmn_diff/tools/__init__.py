"""Command-line tools for BPMN diff."""
