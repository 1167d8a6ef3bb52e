# modules/fsrs/config.py

# FSRS-5 default model weights (w0..w18)
#   w0-w3   initial stability for Again/Hard/Good/Easy
#   w4-w7   difficulty: initial, rating slope, delta, mean reversion
#   w8-w10  stability growth on recall
#   w11-w14 stability after a lapse
#   w15,w16 hard penalty, easy bonus
#   w17,w18 same-day (short-term) stability
DEFAULT_PARAMETERS = [
    0.40255, 1.18385, 3.173, 15.69105, 7.1949, 0.5345, 1.4604, 0.0046,
    1.54575, 0.1192, 1.01925, 1.9395, 0.11, 0.29605, 2.2698, 0.2315,
    2.9898, 0.51655, 0.6621,
]


class FSRSDefaultConfig:
    # Exam prep favours a high retention target over fewer reviews
    FSRS_DESIRED_RETENTION = 0.95
    # Kept at or below the days remaining until the exam
    FSRS_MAX_INTERVAL = 7
    # Deterministic final days by default
    FSRS_ENABLE_FUZZ = False
    FSRS_ENABLE_SHORT_TERM = True
    FSRS_GLOBAL_WEIGHTS = list(DEFAULT_PARAMETERS)

    # Short-term ladder, minutes
    NEW_STEPS_MINUTES = {'again': 1, 'hard': 5, 'good': 10}
    LEARNING_STEPS_MINUTES = {'again': 5, 'hard': 10}
    RELEARNING_STEPS_MINUTES = {'again': 5, 'hard': 10}

    # Retry interval for Again when the short-term ladder is disabled
    LONG_TERM_AGAIN_DAYS = 1

    # Clamp ranges of the memory model
    STABILITY_MIN = 0.01
    DIFFICULTY_MIN = 1.0
    DIFFICULTY_MAX = 10.0
