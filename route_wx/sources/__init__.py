from .avwx import AvWxSource

__all__ = ['AvWxSource']
