"""Generate missing UI components from AIC.* usages in a source tree."""

__version__ = "0.3.0"
