"""Services discovered by the scanning tests."""
