"""HTTP preview surface for the calculation engine."""
