"""Team statistics and the weighted prediction model."""
