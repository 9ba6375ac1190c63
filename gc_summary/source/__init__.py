"""Record source adapters."""
