"""Notifier that prints toasts to the terminal."""

from __future__ import annotations

import click

from storefront.application.notifications import Notification, NotificationLevel, Notifier

_STYLES = {
    NotificationLevel.SUCCESS: {"fg": "green"},
    NotificationLevel.INFO: {},
    NotificationLevel.WARNING: {"fg": "yellow"},
    NotificationLevel.ERROR: {"fg": "red", "bold": True},
}


class ClickNotifier(Notifier):

    def notify(self, notification: Notification) -> None:
        click.secho(
            str(notification),
            err=notification.level == NotificationLevel.ERROR,
            **_STYLES[notification.level],
        )
