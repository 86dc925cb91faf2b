"""Business logic services. Routes stay thin and call into these."""
