"""HTTP API for Drop Zone."""
