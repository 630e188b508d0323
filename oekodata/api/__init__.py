# Oekodata API Module
"""FastAPI surface for consumers, operators and Slack."""
