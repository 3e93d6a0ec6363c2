"""
Launch psql with a password injected into its environment.
"""

import logging
import os
import signal
from typing import Dict, Mapping, Optional, Sequence

from .config import PsqlwSettings
from .constants import (
    ERROR_COMMAND_SIGNALED,
    ERROR_COMMAND_START_FAILED,
    ERROR_NO_USERNAME,
    ERROR_PROVIDER_EXITED,
    ERROR_PROVIDER_INVOKE_FAILED,
    ERROR_PROVIDER_UNDEFINED,
    PASSWORD_VARIABLE,
)
from .exceptions import (
    LaunchError,
    ProviderExitError,
    ProviderInvocationError,
    ProviderNotConfiguredError,
    PsqlwError,
)
from .resolver import UsernameResolver
from .runner import CommandRunner, SubprocessRunner


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class Launcher:
    """
    Builds the child environment and runs the target command.

    Args:
        invoked_path: Path the wrapper was invoked as (argv[0]); the default
            password provider is looked up in its directory
        logger: Logger for diagnostics
        runner: CommandRunner used for the provider and the target command
        environ: Environment to copy for the child (default: os.environ)
        resolver: UsernameResolver (default: one sharing environ and logger)
    """

    def __init__(
        self,
        invoked_path: str,
        logger: Optional[logging.Logger] = None,
        runner: Optional[CommandRunner] = None,
        environ: Optional[Mapping[str, str]] = None,
        resolver: Optional[UsernameResolver] = None,
    ):
        self.invoked_path = invoked_path
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or SubprocessRunner()
        self.environ = os.environ if environ is None else environ
        self.settings = PsqlwSettings(self.environ)
        self.resolver = resolver or UsernameResolver(self.environ, self.logger)

    def launch(self, command: str, args: Sequence[str]) -> int:
        """Run command with args and return the exit code for this process."""
        try:
            env = self.build_env(args)
        except PsqlwError as e:
            self.logger.error("%s", e)
            return 1

        try:
            return self.run_command(command, args, env)
        except LaunchError as e:
            self.logger.error("%s", e)
            return 1

    def build_env(self, args: Sequence[str]) -> Dict[str, str]:
        """
        Return a copy of the environment with the password added.

        Raises:
            ProviderNotConfiguredError: If a username was found but no provider is set up
            ProviderError: If the provider cannot be run or fails
        """
        env = dict(self.environ)
        username = self.resolver.resolve(args)
        if username is None:
            self.logger.warning(ERROR_NO_USERNAME)
            return env

        password = self.retrieve_password(username)
        if password.strip():
            env[PASSWORD_VARIABLE] = password
        else:
            self.logger.debug(
                "Empty password for %s, %s not set", username, PASSWORD_VARIABLE
            )
        return env

    def password_provider(self) -> Optional[str]:
        """Return the provider named by PGW_PASSWORD_PROVIDER or found beside the wrapper."""
        return (
            self.settings.password_provider_override()
            or self.settings.default_password_provider(self.invoked_path)
        )

    def retrieve_password(self, username: str) -> str:
        provider = self.password_provider()
        if provider is None:
            raise ProviderNotConfiguredError(ERROR_PROVIDER_UNDEFINED)
        return self.invoke_password_provider(provider, username)

    def invoke_password_provider(self, provider: str, username: str) -> str:
        """
        Run provider with username and return its output minus trailing newlines.

        Raises:
            ProviderInvocationError: If the provider cannot be started
            ProviderExitError: If the provider exits with a non-zero status
        """
        self.logger.debug("Invoking password provider %s for %s", provider, username)
        try:
            result = self.runner.run(provider, [username], capture_output=True)
        except OSError as e:
            raise ProviderInvocationError(
                ERROR_PROVIDER_INVOKE_FAILED.format(provider=provider, error=e),
                provider,
                e,
            )

        if result.returncode != 0:
            if result.returncode < 0:
                error = f"signal: {_signal_name(-result.returncode)}"
            else:
                error = f"exit status {result.returncode}"
            raise ProviderExitError(
                ERROR_PROVIDER_EXITED.format(provider=provider, error=error), provider
            )

        return os.fsdecode((result.stdout or b"").rstrip(b"\n"))

    def run_command(
        self, command: str, args: Sequence[str], env: Mapping[str, str]
    ) -> int:
        """
        Run the target command with inherited stdio and return its exit code.

        Raises:
            LaunchError: If the command cannot be started
        """
        try:
            result = self.runner.run(command, args, env=env)
        except OSError as e:
            raise LaunchError(
                ERROR_COMMAND_START_FAILED.format(command=command, error=e), e
            )

        if result.returncode < 0:
            signum = -result.returncode
            self.logger.error(
                ERROR_COMMAND_SIGNALED.format(
                    command=command, signal=_signal_name(signum)
                )
            )
            return 128 + signum

        return result.returncode


def launch(
    invoked_name: str,
    target_command: str,
    args: Sequence[str],
    *,
    runner: Optional[CommandRunner] = None,
    environ: Optional[Mapping[str, str]] = None,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Run target_command with args, with PGPASSWORD set for the resolved user.

    Args:
        invoked_name: Path the wrapper was invoked as (argv[0])
        target_command: Command to run, e.g. "psql"
        args: Arguments for the target, without the wrapper's program name

    Returns:
        Exit code for the wrapper process
    """
    launcher = Launcher(invoked_name, logger=logger, runner=runner, environ=environ)
    return launcher.launch(target_command, args)
