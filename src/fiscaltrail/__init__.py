"""Fiscaltrail - historical fiscal reconstruction for rental properties."""
