"""Access to the remote GitHub contents API."""
