# File: examprep_app/modules/exam/config.py


class ExamDefaultConfig:
    """Defaults for practice exams."""
    # Mirrors the licensing rule; not user-configurable
    PASS_THRESHOLD = 75

    # Electrical engineering, codes and abbreviations, regulatory framework
    DEFAULT_QUESTIONS_PER_SECTION = {1: 20, 2: 10, 3: 10}
    DEFAULT_SHUFFLE_QUESTIONS = True

    # Binary exam outcomes fed into the memory model after completion
    FEED_MEMORY_MODEL_ON_COMPLETE = True
