import random

# Plausible bathroom-scale readings, in pounds
MIN_WEIGHT_LBS = 100.0
MAX_WEIGHT_LBS = 250.0


def detect_weight(image: bytes) -> float:
    """
    Stand-in for a real scale-display reader: the image is not inspected,
    a uniformly random reading is returned, rounded to one decimal.
    """
    return round(random.uniform(MIN_WEIGHT_LBS, MAX_WEIGHT_LBS), 1)
