"""Abstract Volume Backend - the strategy contract every backend kind implements."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from ....core.exceptions import CommandError, ConfigMismatchError, VolumeError
from ....models import BackendKind, OperationResult
from ....utils.process_runner import CommandRunner
from ..base_adapter import BasePlatformAdapter
from ..error_classifier import MountErrorClassifier


class VolumeBackend(ABC):
    """
    Strategy for one backend kind.

    mount, unmount and check_health are idempotent and never raise: every
    failure comes back as an error OperationResult carrying its ErrorKind.
    Subclasses implement the _do_* hooks and raise VolumeError (or let
    CommandError/OSError escape, which gets classified here).
    """

    kind: BackendKind
    config_type: Type[Any]

    def __init__(
        self,
        adapter: BasePlatformAdapter,
        runner: CommandRunner,
        timeout: float,
        classifier: Optional[MountErrorClassifier] = None,
    ):
        self._adapter = adapter
        self._runner = runner
        self._timeout = timeout
        self._classifier = classifier or MountErrorClassifier()

    async def mount(self, config, target: str) -> OperationResult:
        return await self._guard("mount", config, target, self._do_mount)

    async def unmount(self, config, target: str) -> OperationResult:
        return await self._guard("unmount", config, target, self._do_unmount)

    async def check_health(self, config, target: str) -> OperationResult:
        return await self._guard("health check", config, target, self._do_check_health)

    @abstractmethod
    async def _do_mount(self, config, target: str) -> OperationResult:
        pass

    @abstractmethod
    async def _do_unmount(self, config, target: str) -> OperationResult:
        pass

    @abstractmethod
    async def _do_check_health(self, config, target: str) -> OperationResult:
        pass

    @property
    def label(self) -> str:
        return self.kind.value.upper()

    async def _guard(self, operation: str, config, target: str, func) -> OperationResult:
        if not isinstance(config, self.config_type):
            error = ConfigMismatchError(self.kind.value, getattr(config, "backend", type(config).__name__))
            logging.error(error.message)
            return OperationResult.failed(error.message, error.kind)

        try:
            return await func(config, target)
        except VolumeError as e:
            self._log_failure(operation, target, e)
            return OperationResult.failed(e.message, e.kind)
        except (CommandError, OSError) as e:
            error = self._classifier.to_volume_error(e, f"{self.label} {operation} failed")
            self._log_failure(operation, target, error)
            return OperationResult.failed(error.message, error.kind)

    def _log_failure(self, operation: str, target: str, error: VolumeError) -> None:
        if operation == "health check":
            logging.debug(f"{self.label} health check for {target}: {error.message}")
        else:
            logging.error(f"Error during {self.label} {operation} of {target}: {error.message}")
