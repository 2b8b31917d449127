"""Small helpers shared across StudyHub."""
