"""SMB backends - kernel CIFS mount where the platform has local mount points, UNC access otherwise."""

import logging
from typing import List, Optional

import aiofiles.os

from ....core.exceptions import CommandError, NotMountedError, VolumeError, VolumeIOError
from ....models import BackendKind, ErrorKind, OperationResult, SmbConfig
from ....utils.process_runner import CommandRunner
from ...secrets.secret_resolver import SecretResolver
from ..base_adapter import BasePlatformAdapter
from ..error_classifier import MountErrorClassifier
from .base_backend import VolumeBackend
from .kernel_mount_backend import KernelMountBackend

# net use: 2250 = "This network connection does not exist"
NET_CONNECTION_NOT_FOUND = 2250
# net use: 1219 = session with other credentials exists, 85 = local device name in use
NET_ALREADY_CONNECTED = {85, 1219}


def escape_option_value(value: str) -> str:
    """mount.cifs reads a doubled comma inside pass= as a literal comma."""
    return value.replace(",", ",,")


class CifsMountBackend(KernelMountBackend):
    """SMB share mounted with `mount -t cifs` on a managed mount point."""

    kind = BackendKind.SMB
    config_type = SmbConfig
    expected_fstypes = ("cifs", "smb3")

    def __init__(
        self,
        adapter: BasePlatformAdapter,
        runner: CommandRunner,
        timeout: float,
        secret_resolver: SecretResolver,
        classifier: Optional[MountErrorClassifier] = None,
    ):
        super().__init__(adapter, runner, timeout, classifier)
        self._secret_resolver = secret_resolver

    async def _run_mount(self, config: SmbConfig, target: str) -> None:
        password = None
        if config.password:
            password = (await self._secret_resolver.resolve(config.password)).get_secret_value()

        source = f"//{config.server}/{config.share}"
        options = self._build_options(config, password)
        secrets = list(dict.fromkeys([password, escape_option_value(password)])) if password else []

        args = self._adapter.mount_command("cifs", source, target, options)
        try:
            await self._runner.run_checked(args, self._timeout, secrets)
        except CommandError as e:
            logging.warning(f"Initial SMB mount failed, retrying with legacy flag: {e.stderr.strip() or e}")
            legacy_args = self._adapter.mount_command("cifs", source, target, options, legacy=True)
            await self._runner.run_checked(legacy_args, self._timeout, secrets)

    def _build_options(self, config: SmbConfig, password: Optional[str]) -> List[str]:
        uid, gid = self._adapter.process_owner()

        options = [f"user={config.username}" if config.username else "guest"]
        if password:
            options.append(f"pass={escape_option_value(password)}")
        options.extend([f"port={config.port}", f"uid={uid}", f"gid={gid}"])

        if config.vers and config.vers != "auto":
            options.append(f"vers={config.vers}")

        if config.domain:
            options.append(f"domain={config.domain}")

        if config.read_only:
            options.append("ro")

        return options


class SmbShareBackend(VolumeBackend):
    """
    SMB share reached through its UNC path.

    No local mount point exists: mounting means authenticating a network
    session with `net use`, and the target is the UNC path itself.
    """

    kind = BackendKind.SMB
    config_type = SmbConfig

    def __init__(
        self,
        adapter: BasePlatformAdapter,
        runner: CommandRunner,
        timeout: float,
        secret_resolver: SecretResolver,
        classifier: Optional[MountErrorClassifier] = None,
    ):
        super().__init__(adapter, runner, timeout, classifier)
        self._secret_resolver = secret_resolver

    async def _do_check_health(self, config: SmbConfig, target: str) -> OperationResult:
        if not await aiofiles.os.path.isdir(target):
            raise NotMountedError("SMB path is not accessible")

        # Session auth can succeed while the share is still unusable
        try:
            await aiofiles.os.listdir(target)
        except OSError as e:
            raise self._classifier.to_volume_error(e, "Cannot read SMB path")

        logging.debug(f"SMB path {target} is healthy and accessible.")
        return OperationResult.mounted()

    async def _do_mount(self, config: SmbConfig, target: str) -> OperationResult:
        health = await self.check_health(config, target)
        if not health.is_error:
            logging.debug(f"SMB path {target} is already accessible.")
            return health

        password = None
        if config.password:
            password = (await self._secret_resolver.resolve(config.password)).get_secret_value()

        server_share = self._adapter.build_unc_path(config.server, config.share)
        user = None
        if config.username:
            user = f"{config.domain}\\{config.username}" if config.domain else config.username

        args = self._adapter.connect_share_command(server_share, password, user)
        logging.debug(f"Connecting to SMB share: net use {server_share} ...")
        result = await self._runner.run(args, self._timeout, [password] if password else [])

        if not result.ok:
            code = self._classifier.net_error_code(f"{result.stderr} {result.stdout}")
            if code in NET_ALREADY_CONNECTED:
                logging.warning("SMB connection already exists, checking access...")
                verified = await self.check_health(config, target)
                if not verified.is_error:
                    return verified
            raise self._classifier.to_volume_error(
                CommandError(args[0], result.exit_code, result.stderr, result.stdout),
                "Failed to connect to SMB share",
            )

        verified = await self.check_health(config, target)
        if verified.error_kind == ErrorKind.NOT_MOUNTED:
            raise VolumeIOError(f"Connected to SMB share but path {target} is not accessible")
        if verified.is_error:
            raise VolumeError(f"Connected to SMB share but it is not usable: {verified.error}", verified.error_kind)

        logging.info(f"SMB share {target} connected successfully.")
        return OperationResult.mounted()

    async def _do_unmount(self, config: SmbConfig, target: str) -> OperationResult:
        server_share = self._adapter.build_unc_path(config.server, config.share)

        logging.debug(f"Disconnecting from SMB share: net use {server_share} /delete")
        args = self._adapter.disconnect_share_command(server_share)
        result = await self._runner.run(args, self._timeout)

        if not result.ok:
            code = self._classifier.net_error_code(f"{result.stderr} {result.stdout}")
            if code != NET_CONNECTION_NOT_FOUND:
                raise self._classifier.to_volume_error(
                    CommandError(args[0], result.exit_code, result.stderr, result.stdout),
                    "Failed to disconnect from SMB share",
                )
            logging.debug(f"No network connection to {server_share}, nothing to disconnect")

        logging.info(f"SMB share {server_share} disconnected.")
        return OperationResult.unmounted()
