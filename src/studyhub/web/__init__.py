"""Web interface for StudyHub."""
