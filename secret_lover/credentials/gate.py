"""Authentication gate interposed before privileged credential reads.

An authenticator reports its decision through a callback, possibly from
another thread and possibly much later (a fingerprint prompt, a password
dialog). AuthenticationGate turns that one decision into a synchronous
answer for the caller:

    IDLE -> DECIDING -> APPROVED
                     -> DENIED

An authenticator that is unavailable on this host (no sensor, no terminal,
no helper installed) approves without challenging. Unavailability is not an
authentication failure.

Example:
    >>> gate = AuthenticationGate(CommandAuthenticator(["touchid-prompt"]))
    >>> gate.authorize("Access secret: OPENAI_API_KEY")
"""

import shutil
import subprocess  # nosec B404
import sys
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import TYPE_CHECKING, Protocol

import click
import structlog

from secret_lover.exceptions import AuthenticationDeniedError, AuthenticationTimeoutError

if TYPE_CHECKING:
    from secret_lover.config.settings import SecretLoverSettings

log = structlog.get_logger(__name__)

DecisionCallback = Callable[[bool], None]


class GateState(str, Enum):
    """States of a single authentication challenge."""

    IDLE = "idle"
    DECIDING = "deciding"
    APPROVED = "approved"
    DENIED = "denied"

    def __str__(self) -> str:
        return self.value


class Authenticator(Protocol):
    """A yes/no authentication mechanism."""

    @property
    def name(self) -> str:
        """Authenticator identifier (e.g., 'command')."""
        ...

    @property
    def available(self) -> bool:
        """Whether the mechanism can be used on this host."""
        ...

    def challenge(self, reason: str, on_decision: DecisionCallback) -> None:
        """Ask for authentication and report the outcome via ``on_decision``.

        May return before the decision is made. ``on_decision`` must be
        called exactly once, from any thread.
        """
        ...


class NoAuthenticator:
    """Authenticator for hosts without any mechanism. Never available."""

    @property
    def name(self) -> str:
        return "none"

    @property
    def available(self) -> bool:
        return False

    def challenge(self, reason: str, on_decision: DecisionCallback) -> None:
        on_decision(True)


class ConfirmAuthenticator:
    """Yes/no confirmation on the controlling terminal.

    The prompt runs on a worker thread so the gate's timeout applies while
    the user has not answered yet. An aborted prompt (Ctrl-C, EOF) denies.
    """

    @property
    def name(self) -> str:
        return "confirm"

    @property
    def available(self) -> bool:
        return sys.stdin is not None and sys.stdin.isatty()

    def challenge(self, reason: str, on_decision: DecisionCallback) -> None:
        _start_worker(self._run, reason, on_decision)

    def _run(self, reason: str, on_decision: DecisionCallback) -> None:
        try:
            approved = click.confirm(f"{reason}. Allow?", default=False, err=True)
        except (click.Abort, OSError) as e:
            log.info("auth_confirm_aborted", error=str(e))
            approved = False
        on_decision(approved)


class CommandAuthenticator:
    """Delegate the decision to an external helper program.

    The helper is run with the reason appended as its last argument. Exit
    status 0 approves; anything else denies. The helper runs on a worker
    thread so ``challenge`` returns immediately.

    Example:
        >>> auth = CommandAuthenticator(["/usr/local/bin/biometric-prompt"])
        >>> auth.available
        True
    """

    def __init__(self, command: Sequence[str] | None) -> None:
        self.command = list(command or [])

    @property
    def name(self) -> str:
        return "command"

    @property
    def available(self) -> bool:
        return bool(self.command) and shutil.which(self.command[0]) is not None

    def challenge(self, reason: str, on_decision: DecisionCallback) -> None:
        _start_worker(self._run, reason, on_decision)

    def _run(self, reason: str, on_decision: DecisionCallback) -> None:
        try:
            result = subprocess.run([*self.command, reason], check=False)  # nosec B603
        except OSError as e:
            log.warning("auth_command_failed", command=self.command[0], error=str(e))
            on_decision(False)
            return

        log.debug("auth_command_finished", command=self.command[0], returncode=result.returncode)
        on_decision(result.returncode == 0)


def _start_worker(target: Callable[..., None], *args: object) -> None:
    threading.Thread(target=target, args=args, name="secret-lover-auth", daemon=True).start()


class AuthenticationGate:
    """Synchronous adapter over a callback-driven authenticator.

    Each call to ``decide`` runs one challenge through the state machine and
    blocks until it reaches a terminal state. Only one challenge per gate is
    outstanding at any time: concurrent callers wait for the lock, and a
    challenge that timed out still counts as outstanding until its
    authenticator reports back. No new challenge is issued before then.

    Attributes:
        authenticator: Mechanism asked for decisions
        timeout: Seconds to wait for a decision, or None to wait indefinitely
        state: State of the most recent challenge
    """

    def __init__(self, authenticator: Authenticator, timeout: float | None = None) -> None:
        self.authenticator = authenticator
        self.timeout = timeout
        self.state = GateState.IDLE
        self._lock = threading.Lock()
        self._pending: Future[bool] | None = None

    def decide(self, reason: str) -> GateState:
        """Run one challenge and return its terminal state.

        Raises:
            AuthenticationTimeoutError: If no decision arrives within ``timeout``,
                or an earlier timed-out challenge is still undecided
        """
        with self._lock:
            self.state = GateState.DECIDING

            if not self.authenticator.available:
                log.debug("auth_gate_unavailable", authenticator=self.authenticator.name)
                self.state = GateState.APPROVED
                return self.state

            self._await_pending()

            decision: Future[bool] = Future()

            def on_decision(approved: bool) -> None:
                try:
                    decision.set_result(bool(approved))
                except InvalidStateError:
                    log.warning("auth_gate_duplicate_decision", authenticator=self.authenticator.name)

            log.info("auth_gate_challenge", authenticator=self.authenticator.name, reason=reason)
            try:
                self.authenticator.challenge(reason, on_decision)
            except Exception as e:
                log.warning("auth_gate_challenge_failed", authenticator=self.authenticator.name, error=str(e))
                on_decision(False)

            try:
                approved = decision.result(timeout=self.timeout)
            except FutureTimeoutError as e:
                self.state = GateState.DENIED
                self._pending = decision
                raise AuthenticationTimeoutError(
                    "Authentication was not completed", timeout_seconds=self.timeout
                ) from e

            self.state = GateState.APPROVED if approved else GateState.DENIED
            log.info("auth_gate_decided", authenticator=self.authenticator.name, state=str(self.state))
            return self.state

    def _await_pending(self) -> None:
        """Wait for a timed-out challenge to resolve. Its late answer is discarded."""
        if self._pending is None:
            return

        try:
            late = self._pending.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            self.state = GateState.DENIED
            raise AuthenticationTimeoutError(
                "Previous authentication is still pending", timeout_seconds=self.timeout
            ) from e

        log.debug("auth_gate_late_decision_discarded", authenticator=self.authenticator.name, approved=late)
        self._pending = None

    def authorize(self, reason: str, reference: str | None = None) -> None:
        """Return if the gate approves, raise otherwise.

        Raises:
            AuthenticationDeniedError: If the authenticator denies access
            AuthenticationTimeoutError: If no decision arrives within ``timeout``
        """
        if self.decide(reason) is not GateState.APPROVED:
            raise AuthenticationDeniedError("Authentication failed", reference=reference)


def build_authenticator(settings: "SecretLoverSettings") -> Authenticator:
    """Create the authenticator selected by configuration."""
    if settings.gate == "auto":
        if settings.gate_command:
            return CommandAuthenticator(settings.gate_command)
        return ConfirmAuthenticator()
    if settings.gate == "confirm":
        return ConfirmAuthenticator()
    if settings.gate == "command":
        return CommandAuthenticator(settings.gate_command)
    return NoAuthenticator()


def build_gate(settings: "SecretLoverSettings") -> AuthenticationGate:
    """Create an authentication gate from configuration."""
    return AuthenticationGate(build_authenticator(settings), timeout=settings.gate_timeout)
