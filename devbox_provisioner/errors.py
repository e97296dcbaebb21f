from __future__ import annotations

from typing import Optional, Sequence


class ProvisionError(RuntimeError):
    """Base class for provisioning failures."""


class CommandError(ProvisionError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr:
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class StepFailure(ProvisionError):
    """A step failed; the remaining steps were not run."""

    def __init__(self, step_id: str, returncode: int, message: Optional[str] = None) -> None:
        self.step_id = step_id
        self.returncode = returncode
        super().__init__(message or f"Step {step_id} failed ({returncode})")


class RecipeError(ValueError):
    pass
