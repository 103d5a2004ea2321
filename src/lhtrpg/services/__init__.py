"""Services built on the document store and the rules engine."""
