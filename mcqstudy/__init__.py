"""Question import, test taking and review helpers for the MCQ study portal."""
