"""Listings app package: advertising spaces offered by owners."""
