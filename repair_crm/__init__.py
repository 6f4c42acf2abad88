"""Auto repair shop CRM service."""
