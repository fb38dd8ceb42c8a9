"""Page-level coordinator that decides which hosts get a widget and owns them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from chooser.config import ChooserConfig, PageSettings
from chooser.data.protocols import SelectHost
from chooser.services.controller import SelectionController

logger = logging.getLogger(__name__)


class ChooserPage:
    """Explicit collection of the widgets created for one page."""

    def __init__(self, settings: PageSettings | None = None) -> None:
        self.settings = settings or PageSettings()
        self._widgets: list[tuple[SelectHost, SelectionController]] = []

    @property
    def controllers(self) -> list[SelectionController]:
        return [controller for _, controller in self._widgets]

    def controller_for(self, host: SelectHost) -> SelectionController | None:
        for attached, controller in self._widgets:
            if attached is host:
                return controller
        return None

    def should_attach(self, host: SelectHost) -> bool:
        if self.settings.opt_in_class in host.classes:
            return True
        if host.classes & self.settings.ignore_classes:
            return False
        minimum = self.settings.minimum_for(host.multiple)
        return not minimum or host.option_count >= minimum

    def config_for(self, host: SelectHost) -> ChooserConfig:
        config = ChooserConfig.from_options(self.settings.options)
        if host.multiple and host.cardinality:
            config = replace(config, max_selected_options=host.cardinality)
        return config

    def attach(self, hosts: Iterable[SelectHost]) -> list[SelectionController]:
        """Create a controller for every eligible host not attached yet."""
        created: list[SelectionController] = []
        for host in hosts:
            if self.controller_for(host) is not None or not self.should_attach(host):
                continue
            controller = SelectionController(host, self.config_for(host))
            self._widgets.append((host, controller))
            created.append(controller)
        logger.debug("Attached %d widgets (%d total)", len(created), len(self._widgets))
        return created

    def detach(self, host: SelectHost) -> bool:
        for position, (attached, controller) in enumerate(self._widgets):
            if attached is host:
                controller.destroy()
                del self._widgets[position]
                return True
        return False

    def close_all(self, *, except_for: SelectionController | None = None) -> None:
        """Close every open widget, e.g. when focus moves elsewhere on the page."""
        for controller in self.controllers:
            if controller is except_for:
                continue
            if controller.active_field or controller.results_showing:
                controller.close_field()
