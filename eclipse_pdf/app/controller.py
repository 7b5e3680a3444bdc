"""Adapter wiring for the desktop app runtime.

This module owns lazy construction of the storage, backend and instance
adapters that depend on values in
:class:`eclipse_pdf.viewmodels.settings_vm.SettingsVM` and on the data
directory. ``eclipse_pdf.app.main`` creates one instance at startup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..adapters.backend_offline import BackendOffline
from ..adapters.backend_rest import BackendRestAdapter
from ..adapters.instance_local import LocalInstanceAdapter
from ..adapters.storage_local import StorageLocal
from ..domain.ports import BackendPort
from ..viewmodels.settings_vm import SettingsVM


class AppController:
    """Create and cache runtime adapters from settings state.

    Call chain:
        ``eclipse_pdf.app.main.main`` builds one controller, calls
        ``load_settings`` and then hands ``storage``, ``backend`` and
        ``instance_port`` to the session orchestrator.
    """

    def __init__(self, settings_vm: SettingsVM, *, data_dir: Path) -> None:
        self._log = logging.getLogger(__name__)
        self.settings_vm = settings_vm
        self.data_dir = Path(data_dir)
        self._storage: Optional[StorageLocal] = None
        self._backend: Optional[BackendPort] = None
        self._instance_port: Optional[LocalInstanceAdapter] = None

    @property
    def storage(self) -> StorageLocal:
        if self._storage is None:
            self._storage = StorageLocal(str(self.data_dir))
        return self._storage

    @property
    def backend(self) -> BackendPort:
        """REST adapter when a backend URL is configured, otherwise offline."""
        if self._backend is None:
            base_url = self.settings_vm.effective_backend_url()
            if not base_url:
                self._log.info("No backend configured; running with local trial only")
                self._backend = BackendOffline()
            else:
                cfg = self.settings_vm.config
                self._backend = BackendRestAdapter(
                    base_url,
                    api_key=self.settings_vm.api_key or None,
                    request_timeout_s=cfg.request_timeout_s,
                    entitlement_timeout_s=cfg.entitlement_timeout_s,
                    retries=1,
                )
        return self._backend

    @property
    def instance_port(self) -> LocalInstanceAdapter:
        if self._instance_port is None:
            self._instance_port = LocalInstanceAdapter(str(self.data_dir))
        return self._instance_port

    def load_settings(self) -> bool:
        """Apply ``user_settings.json`` onto the view-model; defaults on any failure.

        On first run (no file yet) the defaults are written out so the file
        can be edited by hand.
        """
        try:
            payload = self.storage.load_user_settings()
        except Exception as exc:
            self._log.warning("Could not read user settings, using defaults: %s", exc)
            return False
        if not payload:
            self._write_defaults()
            return False
        try:
            self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            self._log.warning("Ignoring invalid user settings: %s", exc)
            return False
        return True

    def _write_defaults(self) -> None:
        try:
            self.storage.save_user_settings(self.settings_vm.to_dict())
        except Exception as exc:
            self._log.warning("Could not write default user settings: %s", exc)
            return
        self._log.info("Wrote default settings to %s", self.data_dir)


__all__ = ["AppController"]
