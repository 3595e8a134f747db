"""Built-in CLI sub-commands for symplur.

* :mod:`~symplur.commands.request` -- ``get``, ``post``, ``put``, ``patch``,
  and ``delete`` against the configured API.
* :mod:`~symplur.commands.token` -- show, refresh, or clear the access token.
* :mod:`~symplur.commands.config` -- view and modify persisted settings.
* :mod:`~symplur.commands.session` -- builds the client used by the above.
"""
