"""Record models for canonical customers, staging accounts and API keys."""
