"""Flow services - one package per guided flow."""
