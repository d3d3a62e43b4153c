from .render_tree import RenderTree
from .playwright_tree import PlaywrightRenderTree

__all__ = ['RenderTree', 'PlaywrightRenderTree']
