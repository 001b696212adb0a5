"""Click subcommands registered on the ``cpkeeper`` group."""
