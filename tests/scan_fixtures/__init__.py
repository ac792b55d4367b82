"""Modules exercising type source filtering."""
