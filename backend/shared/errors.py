class ConfigurationError(ValueError):
    """Required configuration (Supabase, Resend) is missing. Aborts the whole invocation."""
