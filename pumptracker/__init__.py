"""Pump tracker capacity forecasting."""
