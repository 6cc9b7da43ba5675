from enum import Enum


class FirstSamplePolicy(Enum):
    ZERO = "zero"
    SKIP = "skip"
