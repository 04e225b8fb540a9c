"""Command line interface: `pbquery condition`, `pbquery normalize`, `pbquery operators`."""
