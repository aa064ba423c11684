"""Tkinter views for the barcode generator."""
