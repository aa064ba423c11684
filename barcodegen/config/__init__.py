"""Configuration helpers for the barcode generator."""
