"""Registry operations built on the transport pipeline."""
