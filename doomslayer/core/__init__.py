"""Detection engine, providers and tick driver."""
