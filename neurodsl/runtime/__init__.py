from neurodsl.runtime.environment import Environment
from neurodsl.runtime.values import Boolean, Number, Text, Value, coerce

__all__ = ["Environment", "Boolean", "Number", "Text", "Value", "coerce"]
