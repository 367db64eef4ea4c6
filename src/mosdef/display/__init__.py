"""Display settings writers."""

from .setters import DisplaySetter, DisplayChangeResult, XrandrSetter, SwaySetter, get_setter

__all__ = ["DisplaySetter", "DisplayChangeResult", "XrandrSetter", "SwaySetter", "get_setter"]
