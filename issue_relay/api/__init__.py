"""HTTP surface of the relay.

Usage
-----
Create the application::

    from issue_relay.api import AppDependencies, create_app

    app = create_app()                                  # probes only
    app = create_app(AppDependencies(notifier=notifier))  # push endpoint

"""

from issue_relay.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
