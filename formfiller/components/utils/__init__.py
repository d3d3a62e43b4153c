from .waiter import Waiter

__all__ = ['Waiter']
