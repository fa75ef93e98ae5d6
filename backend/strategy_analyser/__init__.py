"""Strategy analyser service: upload, store and compare NinjaTrader strategy runs."""

__all__: list[str] = []
