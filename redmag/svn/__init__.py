"""Subversion repository administration through the ``svnadmin`` tool."""

from redmag.svn.admin import ReposAdmin, SvnAdmin, SvnAdminError

__all__ = ["ReposAdmin", "SvnAdmin", "SvnAdminError"]
