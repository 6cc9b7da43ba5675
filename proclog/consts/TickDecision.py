from enum import Enum


class TickDecision(Enum):
    CONTINUE = "continue"
    STOP = "stop"
