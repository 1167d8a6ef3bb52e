"""Feature modules of the exam preparation service."""
