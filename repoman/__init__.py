"""repoman: keep a batch of git repositories cloned, current and accounted for."""

__version__ = "0.3.0"
