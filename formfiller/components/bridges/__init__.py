from .handler_bridge import (
    BoundHandler,
    HandlerBridge,
    NativeOnlyBridge,
    ReactHandlerBridge,
    SyntheticEvent,
    bridge_names,
    get_handler_bridge
)

__all__ = [
    'BoundHandler',
    'HandlerBridge',
    'NativeOnlyBridge',
    'ReactHandlerBridge',
    'SyntheticEvent',
    'bridge_names',
    'get_handler_bridge'
]
