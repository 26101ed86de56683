"""Log, catalog, profile and cycle stores."""
