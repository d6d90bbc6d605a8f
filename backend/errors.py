class ValidationError(ValueError):
    """Input rejected before any mutation; the stored state is unchanged."""
