"""Fee and reward distribution."""
