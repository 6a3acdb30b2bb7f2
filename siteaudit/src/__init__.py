# Minimal package initializer; public names are re-exported by ``siteaudit``.
__version__ = "1.0.0"
