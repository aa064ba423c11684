"""Desktop barcode generator with a persistent history and A4 print sheet."""
