"""Business rules shared by the request handlers."""
