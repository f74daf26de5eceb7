from enum import Enum

class Bucket(str, Enum):
    CONTROL = "control"    # Baseline scoring configuration
    VARIANT = "variant"    # Alternate scoring configuration under test

class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

class ProjectSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

class Recommendation(str, Enum):
    CONTROL = "control"
    VARIANT = "variant"
    INCONCLUSIVE = "inconclusive"

class ExperimentStatus(str, Enum):
    UNREGISTERED = "unregistered"
    PENDING = "pending"      # Registered, start date not reached
    ACTIVE = "active"
    EXPIRED = "expired"      # Past end date
