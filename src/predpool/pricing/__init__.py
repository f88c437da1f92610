"""Fixed-point math and odds pricing."""
