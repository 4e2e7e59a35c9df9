"""Built-in CLI sub-commands for oauthsign.

* :mod:`~oauthsign.commands.sign` -- print the Authorization header for a
  request without sending it.
* :mod:`~oauthsign.commands.api` -- signed ``get``/``post`` calls and
  ``stream`` following.
* :mod:`~oauthsign.commands.profile` -- create, list, show, remove and
  select profiles.

Single commands are plain callback functions registered on the root app;
``profile`` is a :class:`typer.Typer` sub-application.
"""
