"""API routers."""

from . import genie, remix, workspace

__all__ = ['genie', 'remix', 'workspace']
