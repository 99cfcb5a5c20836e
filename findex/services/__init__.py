"""Service helpers backing the findex API and CLI."""
