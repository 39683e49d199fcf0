"""UI adapters around :class:`chatvim.core.Engine`."""
