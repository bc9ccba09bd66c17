"""Store client, codecs and operations."""
