"""memorybank command-line interface."""
