"""Sample application scanned by the scanner and registration tests."""
