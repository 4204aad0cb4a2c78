from .counter import CounterState

__all__ = ["CounterState"]
