"""Business logic services. Every public operation returns a Result."""
