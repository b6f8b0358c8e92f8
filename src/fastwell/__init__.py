"""fastwell: intermittent fasting tracker with AI suggestions and meal planning."""

__version__ = "0.1.0"
